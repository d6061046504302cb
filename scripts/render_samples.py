#!/usr/bin/env python3
"""
Render sample test-case inputs against a template and print variable diagnostics.
Runs the resolver in-memory (no DB/API/model calls needed).
Usage: python scripts/render_samples.py template.txt inputs.json
  inputs.json: a list of {"title": ..., "input": {...}} objects
"""

import json
import sys
from pathlib import Path

# Add project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from prompteval.engine.resolver import resolve


def main():
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)

    template_path, inputs_path = Path(sys.argv[1]), Path(sys.argv[2])
    for path in (template_path, inputs_path):
        if not path.exists():
            print(f"Error: {path} not found")
            sys.exit(1)

    template = template_path.read_text(encoding="utf-8")
    with open(inputs_path, encoding="utf-8") as f:
        samples = json.load(f)

    for sample in samples:
        resolution = resolve(template, sample.get("input", {}))
        print(f"== {sample.get('title', '(untitled)')}")
        print(resolution.rendered)
        if resolution.missing_in_input:
            print(f"   unresolved: {', '.join(resolution.missing_in_input)}")
        if resolution.missing_in_template:
            print(f"   unused:     {', '.join(resolution.missing_in_template)}")

    print(f"Rendered {len(samples)} samples")


if __name__ == "__main__":
    main()
