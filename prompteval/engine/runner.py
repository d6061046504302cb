"""Evaluation runner - resolve, generate, store.

At most one evaluation exists per (test case, version) pair. Two mechanisms
keep it that way:

* the evaluations table has a unique key on the pair and results are written
  with a single upsert statement;
* a per-pair asyncio.Lock is held from the "already stored?" check through
  the write, so concurrent runs of the same pair in this process call the
  generator once (or, with force_rerun, one after the other).

The generator call happens between two short sessions; no connection is held
while waiting on the provider. The write transaction re-checks (and on
Postgres share-locks) the test case and version, so a pair deleted during
generation raises NotFound and writes nothing. A run cancelled before its
write transaction commits leaves the store untouched.
"""

import asyncio
import logging
import weakref
from collections import OrderedDict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prompteval.engine.resolver import resolve
from prompteval.errors import GenerationFailed, NotFound, PromptEvalError, ValidationError
from prompteval.generation.providers import Generator
from prompteval.models import Evaluation, PromptVersion, TestCase
from prompteval.schemas.evaluation import BatchReport, PairOutcome, RunState
from prompteval.storage import evaluations, prompts, test_cases
from prompteval.utils.canonical import request_hash

logger = logging.getLogger(__name__)

Pair = tuple[str, str]


class EvaluationRunner:
    """Runs test cases against prompt versions and stores the results."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        generator: Generator,
        default_model: str,
        concurrency: int = 4,
        max_failures: int = 10_000,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self._session_maker = session_maker
        self._generator = generator
        self._default_model = default_model
        self._concurrency = concurrency
        # Entries disappear once no coroutine holds or waits on the lock.
        self._locks: weakref.WeakValueDictionary[Pair, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        # Last failure per pair, oldest first. Cleared by the next successful
        # write or by forget(); capped at max_failures entries.
        self._failures: OrderedDict[Pair, str] = OrderedDict()
        self._max_failures = max_failures

    def _lock_for(self, pair: Pair) -> asyncio.Lock:
        lock = self._locks.get(pair)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[pair] = lock
        return lock

    def _record_failure(self, pair: Pair, reason: str) -> None:
        self._failures[pair] = reason
        self._failures.move_to_end(pair)
        while len(self._failures) > self._max_failures:
            self._failures.popitem(last=False)

    def forget(self, test_case_id: str | None = None, prompt_version_id: str | None = None) -> None:
        """Drop failure state for pairs touching a deleted test case or version."""
        stale = [
            pair
            for pair in self._failures
            if pair[0] == test_case_id or pair[1] == prompt_version_id
        ]
        for pair in stale:
            del self._failures[pair]

    async def _load_pair(
        self, test_case_id: str, prompt_version_id: str
    ) -> tuple[TestCase, PromptVersion]:
        async with self._session_maker() as db:
            test_case = await test_cases.require_test_case(db, test_case_id)
            version = await prompts.require_version(db, prompt_version_id)
        if test_case.prompt_id != version.prompt_id:
            raise ValidationError(
                f"Test case {test_case_id} and version {prompt_version_id} belong to different prompts"
            )
        return test_case, version

    async def _generate(self, prompt: str, model: str) -> str:
        try:
            output = await self._generator.generate(prompt, model)
        except GenerationFailed:
            raise
        except Exception as e:
            raise GenerationFailed(f"{type(e).__name__}: {e}") from e
        if not isinstance(output, str):
            raise GenerationFailed(f"malformed response of type {type(output).__name__}")
        return output

    async def _execute(
        self,
        test_case_id: str,
        prompt_version_id: str,
        model: str | None,
        force_rerun: bool,
    ) -> tuple[Evaluation, bool]:
        """Returns (evaluation, generated). generated is False for a cache hit."""
        model = model or self._default_model
        test_case, version = await self._load_pair(test_case_id, prompt_version_id)
        pair = (test_case_id, prompt_version_id)

        async with self._lock_for(pair):
            if not force_rerun:
                async with self._session_maker() as db:
                    existing = await evaluations.get_evaluation(db, *pair)
                if existing is not None:
                    logger.debug("Reusing evaluation %s for %s", existing.evaluation_id, pair)
                    return existing, False

            resolution = resolve(version.template, test_case.input_json)
            if resolution.missing_in_input:
                logger.info(
                    "Unresolved variables %s for test case %s on version %s",
                    resolution.missing_in_input,
                    test_case_id,
                    prompt_version_id,
                )

            logger.info("Generating %s with model %s", pair, model)
            try:
                output = await self._generate(resolution.rendered, model)
            except GenerationFailed as e:
                self._record_failure(pair, e.reason)
                logger.warning("Generation failed for %s: %s", pair, e.reason)
                raise

            async with self._session_maker() as db:
                async with db.begin():
                    try:
                        await evaluations.lock_pair(db, test_case_id, prompt_version_id)
                    except NotFound:
                        self._failures.pop(pair, None)
                        logger.info("Dropping result for %s: deleted during generation", pair)
                        raise
                    evaluation = await evaluations.upsert_evaluation(
                        db,
                        test_case_id=test_case_id,
                        prompt_version_id=prompt_version_id,
                        output=output,
                        rendered_prompt=resolution.rendered,
                        model=model,
                        request_hash=request_hash(resolution.rendered, model),
                    )
            self._failures.pop(pair, None)
            logger.info("Stored evaluation %s for %s", evaluation.evaluation_id, pair)
            return evaluation, True

    async def run(
        self,
        test_case_id: str,
        prompt_version_id: str,
        model: str | None = None,
        force_rerun: bool = False,
    ) -> Evaluation:
        """
        Evaluate one test case against one version.
        Without force_rerun a stored evaluation is returned as-is and nothing
        is generated. Raises NotFound, ValidationError or GenerationFailed;
        on GenerationFailed any previously stored evaluation is kept.
        """
        evaluation, _ = await self._execute(test_case_id, prompt_version_id, model, force_rerun)
        return evaluation

    async def state(self, test_case_id: str, prompt_version_id: str) -> tuple[RunState, str | None]:
        """
        Current lifecycle state of a pair and the last failure reason, if any.
        A pair whose test case or version no longer exists is NOT_RUN.
        """
        pair = (test_case_id, prompt_version_id)
        lock = self._locks.get(pair)
        if lock is not None and lock.locked():
            return RunState.RUNNING, None
        async with self._session_maker() as db:
            exists = (
                await test_cases.get_test_case(db, test_case_id) is not None
                and await prompts.get_version(db, prompt_version_id) is not None
            )
            existing = await evaluations.get_evaluation(db, *pair) if exists else None
        if not exists:
            self._failures.pop(pair, None)
            return RunState.NOT_RUN, None
        if pair in self._failures:
            return RunState.FAILED, self._failures[pair]
        if existing is not None:
            return RunState.SUCCEEDED, None
        return RunState.NOT_RUN, None

    async def run_batch(
        self,
        prompt_id: str,
        base_version_id: str,
        compare_version_id: str,
        model: str | None = None,
        force_rerun: bool = False,
    ) -> BatchReport:
        """
        Run every test case of the prompt against both versions.
        Pairs run concurrently (bounded by the configured concurrency); each
        gets its own outcome and domain failures never stop sibling pairs.
        Infrastructure errors are re-raised once every pair has finished.
        """
        version_ids = list(dict.fromkeys([base_version_id, compare_version_id]))
        async with self._session_maker() as db:
            await prompts.require_prompt(db, prompt_id)
            for version_id in version_ids:
                version = await prompts.get_version(db, version_id)
                if version is None or version.prompt_id != prompt_id:
                    raise NotFound("PromptVersion", version_id)
            cases = await test_cases.list_test_cases(db, prompt_id)

        pairs = [(tc.test_case_id, version_id) for tc in cases for version_id in version_ids]
        semaphore = asyncio.Semaphore(self._concurrency)

        async def _run_pair(pair: Pair) -> PairOutcome:
            test_case_id, version_id = pair
            async with semaphore:
                try:
                    _, generated = await self._execute(test_case_id, version_id, model, force_rerun)
                except GenerationFailed as e:
                    return PairOutcome(
                        test_case_id=test_case_id,
                        prompt_version_id=version_id,
                        status="failed",
                        reason=e.reason,
                    )
                except PromptEvalError as e:
                    # e.g. the test case was deleted while the batch was running
                    return PairOutcome(
                        test_case_id=test_case_id,
                        prompt_version_id=version_id,
                        status="failed",
                        reason=str(e),
                    )
            return PairOutcome(
                test_case_id=test_case_id,
                prompt_version_id=version_id,
                status="succeeded" if generated else "skipped",
            )

        logger.info(
            "Batch for prompt %s: %d pairs, concurrency %d", prompt_id, len(pairs), self._concurrency
        )
        results = await asyncio.gather(*(_run_pair(p) for p in pairs), return_exceptions=True)

        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            for error in errors:
                logger.error("Batch for prompt %s hit an infrastructure error", prompt_id, exc_info=error)
            raise errors[0]

        report = BatchReport(prompt_id=prompt_id, outcomes=list(results))
        logger.info(
            "Batch for prompt %s done: %d succeeded, %d skipped, %d failed",
            prompt_id,
            report.count("succeeded"),
            report.count("skipped"),
            report.count("failed"),
        )
        return report
