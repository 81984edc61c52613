
import time
import uuid
from contextlib import ExitStack
from typing import Dict, Any, Optional

from mailpipe.builder import PipelineBuilder
from mailpipe.config import RunConfig, FilterSpec, DuplicateSpec, SinkSpec, load_config
from mailpipe.stages.filter import Predicate, field_predicate
from mailpipe.utils import get_logger, open_input_feed, open_output_feed

logger = get_logger(__name__)

def _resolve_predicates(cfg: RunConfig) -> Dict[int, Predicate]:
    """Build every filter predicate up front, keyed by pipeline position."""
    return {
        idx: field_predicate(spec.field, spec.op, spec.value, negate=spec.negate)
        for idx, spec in enumerate(cfg.pipeline)
        if isinstance(spec, FilterSpec)
    }

def _declare_stages(builder: PipelineBuilder, cfg: RunConfig, predicates: Dict[int, Predicate], stack: ExitStack) -> None:
    """Append one builder stage per config entry, in config order."""
    for idx, spec in enumerate(cfg.pipeline):
        if isinstance(spec, FilterSpec):
            builder.filter_by(predicates[idx])
        elif isinstance(spec, DuplicateSpec):
            builder.copy_to(spec.to)
        elif isinstance(spec, SinkSpec):
            builder.send(open_output_feed(spec.path, stack, encoding=cfg.encoding))
        else:
            raise ValueError(f"Unknown stage type: {spec!r}")

def run_pipeline(cfg: RunConfig) -> int:
    """Build the configured chain, drive it to completion and return the records read."""
    logger.info("config loaded input=%s stages=%d", cfg.input, len(cfg.pipeline))

    # No feed is opened (and no sink truncated) until every stage resolves.
    predicates = _resolve_predicates(cfg)

    with ExitStack() as stack:
        feed = open_input_feed(cfg.input, stack, encoding=cfg.encoding)
        builder = PipelineBuilder(feed)
        _declare_stages(builder, cfg, predicates, stack)
        logger.debug("declared %r", builder)
        chain = builder.build()

        t0 = time.monotonic()
        count = chain.drive()
        logger.info("drove records=%d took_ms=%d", count, int((time.monotonic()-t0)*1000))
    return count

def run_once(config_path: str, *, overrides: Optional[Dict[str, Any]] = None) -> int:
    """Execute pipeline once with given config file path."""
    run_id = uuid.uuid4().hex[:8]
    logger.info("=== run start id=%s ===", run_id)

    try:
        cfg = load_config(config_path, overrides)
        return run_pipeline(cfg)
    except Exception as e:
        logger.error("Pipeline execution failed: %s", e)
        raise
    finally:
        logger.info("=== run end id=%s ===", run_id)
