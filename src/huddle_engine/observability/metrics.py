"""Metric recording helpers for retrieval and generation."""

from __future__ import annotations

from huddle_engine.observability.logger import get_logger

logger = get_logger("metrics")


def log_retrieval_metrics(
    owner_id: str,
    category: str,
    source_method: str,
    top_scores: list[float],
    num_matches: int,
) -> None:
    logger.info(
        "retrieval_metrics",
        owner_id=owner_id,
        category=category,
        source_method=source_method,
        top_scores=[round(s, 4) for s in top_scores[:5]],
        num_matches=num_matches,
    )


def log_generation_metrics(
    outcome: str,
    attempts: int,
    reply_len: int,
    depth: int,
    duration_ms: float,
) -> None:
    logger.info(
        "generation_metrics",
        outcome=outcome,
        attempts=attempts,
        reply_len=reply_len,
        depth=depth,
        duration_ms=round(duration_ms, 2),
    )


def log_latency(stage: str, duration_ms: float, **fields) -> None:
    logger.info(
        "latency",
        stage=stage,
        duration_ms=round(duration_ms, 2),
        **fields,
    )
