"""Shared fixtures: a SQLite file database per test and a scriptable generator."""

import asyncio

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import prompteval.models  # noqa: F401  (registers tables on Base.metadata)
from prompteval.database import Base
from prompteval.engine.runner import EvaluationRunner
from prompteval.errors import GenerationFailed
from prompteval.storage import prompts, test_cases


class FakeGenerator:
    """Echoes the prompt. Records calls; fails for prompts containing a marker in fail_on."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []
        self.fail_on: set[str] = set()
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate(self, prompt: str, model: str) -> str:
        self.calls.append((prompt, model))
        self.started.set()
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            for marker in self.fail_on:
                if marker in prompt:
                    raise GenerationFailed(f"refused prompt containing {marker}")
            return f"[{model} #{len(self.calls)}] {prompt}"
        finally:
            self.in_flight -= 1


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'prompteval.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def runner(session_maker, generator):
    return EvaluationRunner(session_maker, generator, default_model="test-model", concurrency=2)


@pytest_asyncio.fixture
async def prompt(session_maker):
    """A committed project + prompt."""
    async with session_maker() as session:
        project = await prompts.create_project(session, "Demo")
        created = await prompts.create_prompt(session, project.project_id, "Greeting")
        await session.commit()
    return created


@pytest.fixture
def add_version(session_maker):
    async def _add(prompt_id: str, template: str):
        async with session_maker() as session:
            version = await prompts.create_version(session, prompt_id, template)
            await session.commit()
        return version

    return _add


@pytest.fixture
def add_test_case(session_maker):
    async def _add(prompt_id: str, title: str, data: dict | None = None):
        async with session_maker() as session:
            test_case = await test_cases.create_test_case(session, prompt_id, title, data)
            await session.commit()
        return test_case

    return _add
