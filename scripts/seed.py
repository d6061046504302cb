#!/usr/bin/env python3
"""
Seed script: creates a demo project, a prompt with two versions and three test cases.
Run after migrations: python scripts/seed.py
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from prompteval.database import async_session_maker
from prompteval.storage import prompts, test_cases

TEMPLATES = [
    "Hi {{user}}, welcome to {{store}}!",
    "Hello {{user}}! Thanks for visiting {{store}}. Today's deal: {{deal}}.",
]

TEST_CASES = [
    ("Returning customer", {"user": "John", "store": "Corner Books"}),
    ("New customer with deal", {"user": "Ada", "store": "Corner Books", "deal": "2 for 1"}),
    ("Unrelated extra field", {"user": "Grace", "extra": "ignored"}),
]


async def seed():
    async with async_session_maker() as db:
        project = await prompts.create_project(db, "Demo Project")
        prompt = await prompts.create_prompt(db, project.project_id, "Welcome message")
        versions = [await prompts.create_version(db, prompt.prompt_id, t) for t in TEMPLATES]
        for title, data in TEST_CASES:
            await test_cases.create_test_case(db, prompt.prompt_id, title, data)
        await db.commit()

    print("Seed complete!")
    print(f"Project: {project.project_id}")
    print(f"Prompt:  {prompt.prompt_id}")
    for v in versions:
        print(f"Version #{v.sequence}: {v.version_id}")
    base, compare = versions[0].version_id, versions[-1].version_id
    print("Example: curl -X POST http://localhost:8000/v1/prompts/" + prompt.prompt_id + "/evaluations/batch \\")
    print('  -H "Content-Type: application/json" \\')
    print(f"  -d '{{\"base_version_id\":\"{base}\",\"compare_version_id\":\"{compare}\"}}'")


if __name__ == "__main__":
    asyncio.run(seed())
