"""Retrieval-quality metrics for comparing filter configurations.

Binary relevance: a returned tool is relevant iff its name is expected.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import InvalidInputError
from .models import FilterResult


class EvalCase(BaseModel):
    query: str
    expected_tools: list[str] = Field(min_length=1)
    category: Optional[str] = None


@dataclass
class RetrievalMetrics:
    precision: float = 0.0
    recall: float = 0.0
    mrr: float = 0.0
    ndcg: float = 0.0
    avg_relevant_rank: float = 0.0


def calculate_metrics(result: FilterResult, expected_tools: list[str]) -> RetrievalMetrics:
    """Score one filter result against the tools a query should have returned."""
    retrieved = result.tool_names
    expected = set(expected_tools)
    if not retrieved or not expected:
        return RetrievalMetrics()

    relevant_ranks = [i + 1 for i, name in enumerate(retrieved) if name in expected]

    precision = len(relevant_ranks) / len(retrieved)
    recall = len(relevant_ranks) / len(expected)
    mrr = 1 / relevant_ranks[0] if relevant_ranks else 0.0
    avg_rank = sum(relevant_ranks) / len(relevant_ranks) if relevant_ranks else 0.0

    dcg = sum(1 / math.log2(rank + 1) for rank in relevant_ranks)
    ideal_hits = min(len(expected), len(retrieved))
    idcg = sum(1 / math.log2(i + 2) for i in range(ideal_hits))
    ndcg = dcg / idcg if idcg > 0 else 0.0

    return RetrievalMetrics(
        precision=precision,
        recall=recall,
        mrr=mrr,
        ndcg=ndcg,
        avg_relevant_rank=avg_rank,
    )


def aggregate_metrics(metrics: list[RetrievalMetrics]) -> RetrievalMetrics:
    """Mean of each metric. An empty list aggregates to all zeros."""
    if not metrics:
        return RetrievalMetrics()
    count = len(metrics)
    return RetrievalMetrics(**{
        f.name: sum(getattr(m, f.name) for m in metrics) / count
        for f in fields(RetrievalMetrics)
    })


def load_eval_cases(path: Path) -> list[EvalCase]:
    """Read ``[{query, expected_tools, category?}]`` from a YAML file."""
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or []
    except (OSError, yaml.YAMLError) as e:
        raise InvalidInputError(f"Cannot read eval cases {path}: {e}") from e
    if not isinstance(raw, list):
        raise InvalidInputError(f"Eval cases file {path} must contain a list")
    try:
        return [EvalCase.model_validate(item) for item in raw]
    except ValidationError as e:
        raise InvalidInputError(f"Invalid eval case in {path}: {e}") from e
