from __future__ import annotations

from pathlib import Path
from typing import Optional

from src.utils.logger import get_logger

from .catalog import load_catalog
from .config import load_settings
from .evaluation import aggregate_metrics, calculate_metrics, load_eval_cases
from .filter import ToolFilter
from .models import FilterOptions

logger = get_logger("cli")
DEFAULT_SETTINGS = Path.home() / ".config" / "tool-filter" / "settings.yaml"


async def _build_filter(
    catalog_path: Path,
    settings_path: Optional[Path],
    debug: bool = False,
) -> ToolFilter:
    settings = load_settings(settings_path or DEFAULT_SETTINGS, debug=debug or None)
    tool_filter = ToolFilter(settings=settings)
    try:
        await tool_filter.initialize(load_catalog(catalog_path))
    except BaseException:
        await tool_filter.aclose()
        raise
    return tool_filter


async def cmd_filter(
    query: str,
    catalog_path: Path,
    settings_path: Optional[Path] = None,
    top_k: Optional[int] = None,
    min_score: Optional[float] = None,
    always_include: Optional[list[str]] = None,
    exclude: Optional[list[str]] = None,
    context_messages: Optional[int] = None,
    max_context_tokens: Optional[int] = None,
    debug: bool = False,
) -> str:
    tool_filter = await _build_filter(catalog_path, settings_path, debug)
    try:
        result = await tool_filter.filter(
            query,
            FilterOptions(
                top_k=top_k,
                min_score=min_score,
                always_include=always_include,
                exclude=exclude,
                context_messages=context_messages,
                max_context_tokens=max_context_tokens,
            ),
        )
    finally:
        await tool_filter.aclose()

    if not result.tools:
        return "No relevant tools found."

    lines = [f"Found {len(result.tools)} relevant tools:"]
    for scored in result.tools:
        lines.append(f"  {scored.score:6.3f}  {scored.server_id}/{scored.tool_name}")
    m = result.metrics
    lines.append("")
    lines.append(
        f"Performance: {m.total_time:.2f}ms total "
        f"(embedding {m.embedding_time:.2f}ms, similarity {m.similarity_time:.2f}ms, "
        f"{m.tools_evaluated} tools evaluated)"
    )
    return "\n".join(lines)


async def cmd_stats(
    catalog_path: Path,
    settings_path: Optional[Path] = None,
) -> str:
    tool_filter = await _build_filter(catalog_path, settings_path)
    try:
        stats = tool_filter.stats()
    finally:
        await tool_filter.aclose()

    lines = ["Tool Filter Status", "=" * 40]
    for key, value in stats.items():
        lines.append(f"  {key + ':':<22}{value}")
    return "\n".join(lines)


async def cmd_evaluate(
    catalog_path: Path,
    cases_path: Path,
    settings_path: Optional[Path] = None,
    top_k: Optional[int] = None,
) -> str:
    cases = load_eval_cases(cases_path)
    if not cases:
        return "No evaluation cases found."

    tool_filter = await _build_filter(catalog_path, settings_path)
    per_case = []
    try:
        for case in cases:
            result = await tool_filter.filter(case.query, FilterOptions(top_k=top_k))
            per_case.append(calculate_metrics(result, case.expected_tools))
    finally:
        await tool_filter.aclose()

    overall = aggregate_metrics(per_case)
    logger.info(f"📊 Evaluated {len(cases)} queries")
    return "\n".join([
        f"Evaluated {len(cases)} queries",
        f"  Precision:       {overall.precision:.3f}",
        f"  Recall:          {overall.recall:.3f}",
        f"  MRR:             {overall.mrr:.3f}",
        f"  NDCG:            {overall.ndcg:.3f}",
        f"  Avg rel. rank:   {overall.avg_relevant_rank:.2f}",
    ])
