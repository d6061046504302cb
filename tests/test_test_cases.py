"""Tests for the test case registry."""

import pytest
from sqlalchemy import func, select

from prompteval.errors import NotFound, ValidationError
from prompteval.models import Evaluation, TestCase
from prompteval.storage import evaluations, prompts, test_cases


@pytest.mark.asyncio
async def test_list_in_creation_order(db, prompt):
    for title in ("first", "second", "third"):
        await test_cases.create_test_case(db, prompt.prompt_id, title, {"user": title})
    await db.commit()

    listed = await test_cases.list_test_cases(db, prompt.prompt_id)
    assert [tc.title for tc in listed] == ["first", "second", "third"]
    assert listed[0].input_json == {"user": "first"}


@pytest.mark.asyncio
async def test_test_cases_are_scoped_to_prompt(db, prompt):
    """Another prompt's test cases are not listed."""
    other = await prompts.create_prompt(db, prompt.project_id, "Other")
    await test_cases.create_test_case(db, prompt.prompt_id, "mine", {})
    await test_cases.create_test_case(db, other.prompt_id, "theirs", {})
    await db.commit()

    listed = await test_cases.list_test_cases(db, prompt.prompt_id)
    assert [tc.title for tc in listed] == ["mine"]


@pytest.mark.asyncio
async def test_input_keys_are_free_form(db, prompt):
    """Keys need not match any template placeholder."""
    tc = await test_cases.create_test_case(
        db, prompt.prompt_id, "odd keys", {"not in any template": "x", "n": 3, "ok": True}
    )
    assert tc.input_json == {"not in any template": "x", "n": 3, "ok": True}


@pytest.mark.asyncio
async def test_create_validation(db, prompt):
    """Blank titles and non-scalar values are rejected; nothing is written."""
    with pytest.raises(ValidationError):
        await test_cases.create_test_case(db, prompt.prompt_id, "  ", {})
    with pytest.raises(ValidationError):
        await test_cases.create_test_case(db, prompt.prompt_id, "nested", {"a": {"b": 1}})
    with pytest.raises(ValidationError):
        await test_cases.create_test_case(db, prompt.prompt_id, "list", {"a": [1, 2]})
    with pytest.raises(ValidationError):
        await test_cases.create_test_case(db, prompt.prompt_id, "null", {"a": None})
    with pytest.raises(ValidationError):
        await test_cases.create_test_case(db, prompt.prompt_id, "not a mapping", ["a"])
    assert await db.scalar(select(func.count()).select_from(TestCase)) == 0


@pytest.mark.asyncio
async def test_unknown_prompt(db):
    with pytest.raises(NotFound):
        await test_cases.create_test_case(db, "missing", "title", {})
    with pytest.raises(NotFound):
        await test_cases.list_test_cases(db, "missing")


@pytest.mark.asyncio
async def test_update_replaces_input_and_keeps_evaluations(db, prompt):
    version = await prompts.create_version(db, prompt.prompt_id, "{{x}}")
    tc = await test_cases.create_test_case(db, prompt.prompt_id, "case", {"x": "1"})
    await evaluations.upsert_evaluation(db, tc.test_case_id, version.version_id, output="1")
    await db.commit()

    updated = await test_cases.update_test_case(db, tc.test_case_id, input_data={"x": "2"})
    await db.commit()

    assert updated.title == "case"
    assert updated.input_json == {"x": "2"}
    assert await evaluations.get_evaluation(db, tc.test_case_id, version.version_id) is not None
    with pytest.raises(ValidationError):
        await test_cases.update_test_case(db, tc.test_case_id, title="")


@pytest.mark.asyncio
async def test_delete_cascades_to_evaluations(db, prompt):
    """Every evaluation of the test case goes; other test cases keep theirs."""
    v1 = await prompts.create_version(db, prompt.prompt_id, "a {{x}}")
    v2 = await prompts.create_version(db, prompt.prompt_id, "b {{x}}")
    doomed = await test_cases.create_test_case(db, prompt.prompt_id, "doomed", {"x": "1"})
    kept = await test_cases.create_test_case(db, prompt.prompt_id, "kept", {"x": "2"})
    for tc in (doomed, kept):
        for version in (v1, v2):
            await evaluations.upsert_evaluation(db, tc.test_case_id, version.version_id, output="o")
    await db.commit()

    await test_cases.delete_test_case(db, doomed.test_case_id)
    await db.commit()

    remaining = (await db.execute(select(Evaluation))).scalars().all()
    assert {e.test_case_id for e in remaining} == {kept.test_case_id}
    assert len(remaining) == 2
    assert await test_cases.get_test_case(db, doomed.test_case_id) is None
    with pytest.raises(NotFound):
        await test_cases.delete_test_case(db, doomed.test_case_id)
