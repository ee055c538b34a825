"""
Transformation sessions.

A session evaluates a whole rule set over a batch of named inputs (a
component's props, events, or slots), merges multi-value outputs, runs
post-processors, and memoizes the finished output map.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from dsbridge.core.cache import CacheLayer
from dsbridge.core.errors import RuleLocation, TransformError
from dsbridge.core.ir.rules import RULE_TYPES, MultiValueRule, Rule, parse_rule
from dsbridge.transform.context import TransformContext
from dsbridge.transform.evaluator import RuleEvaluator

logger = logging.getLogger(__name__)

PostProcessor = Callable[[dict[str, Any], TransformContext], Any] | Rule | dict[str, Any]


class TransformationSession:
    """
    Runs rule sets over input batches.

    Args:
        evaluator: Rule evaluator; one sharing ``cache`` is created when omitted
        cache: Memo table for finished outputs (shared with the evaluator)
        use_cache: Default for memoizing ``run`` results
    """

    def __init__(
        self,
        evaluator: RuleEvaluator | None = None,
        cache: CacheLayer | None = None,
        use_cache: bool = True,
    ) -> None:
        if cache is None:
            cache = evaluator.cache if evaluator is not None else CacheLayer()
        self.cache = cache
        self.evaluator = evaluator or RuleEvaluator(cache=cache)
        self.use_cache = use_cache

    def run(
        self,
        inputs: Mapping[str, Any],
        rules: Mapping[str, Rule | dict[str, Any]],
        context: TransformContext | None = None,
        post_processors: Sequence[PostProcessor] = (),
        kind: str = "props",
        use_cache: bool | None = None,
    ) -> dict[str, Any]:
        """
        Transform a batch of inputs.

        Inputs are processed in their given order. A multi-value rule that
        returns a mapping merges it into the output (last write wins); any
        other result is stored under ``rule.target`` or the input name.
        Inputs without a rule pass through unchanged.

        Args:
            inputs: Input name -> value
            rules: Input name -> rule (built or raw)
            context: Component, library, and options; sibling inputs are
                filled in from ``inputs``
            post_processors: Callables ``(output, context) -> output`` or
                rules evaluated with the whole output map as their value
            kind: Batch kind ("props", "events", "slots"), part of the cache key
            use_cache: Override the session default for this call

        Returns:
            Output name -> value
        """
        context = (context or TransformContext()).with_inputs(dict(inputs))
        parsed = {name: parse_rule(rule, RuleLocation(name)) for name, rule in rules.items()}
        processors = [self._prepare_post_processor(p, i) for i, p in enumerate(post_processors)]

        def execute() -> dict[str, Any]:
            return self._execute(inputs, parsed, context, processors)

        if not (self.use_cache if use_cache is None else use_cache):
            return execute()

        key = self.cache.key(
            "session", kind, context.cache_identity(), dict(inputs), parsed, processors
        )
        return copy.deepcopy(self.cache.get_or_compute(key, execute))

    def _execute(
        self,
        inputs: Mapping[str, Any],
        rules: dict[str, Rule],
        context: TransformContext,
        processors: list[Any],
    ) -> dict[str, Any]:
        output: dict[str, Any] = {}

        for name, value in inputs.items():
            rule = rules.get(name)
            if rule is None:
                output[name] = value
                continue

            result = self.evaluator.evaluate(rule, value, context, RuleLocation(name))
            if isinstance(rule, MultiValueRule) and isinstance(result, Mapping):
                output.update(result)
            else:
                output[rule.target or name] = result

        for i, processor in enumerate(processors):
            location = RuleLocation("<post>", (f"post:{i}",))
            if isinstance(processor, RULE_TYPES):
                result = self.evaluator.evaluate(processor, dict(output), context, location)
            else:
                result = processor(dict(output), context)
            if not isinstance(result, Mapping):
                raise TransformError(
                    f"post-processor returned {type(result).__name__}, expected a mapping",
                    location,
                )
            output = dict(result)

        return output

    @staticmethod
    def _prepare_post_processor(processor: PostProcessor, index: int) -> Any:
        if isinstance(processor, dict):
            return parse_rule(processor, RuleLocation("<post>", (f"post:{index}",)))
        return processor

    def clear_cache(self) -> None:
        self.cache.clear()

    def stats(self) -> dict[str, int]:
        return self.cache.stats()
