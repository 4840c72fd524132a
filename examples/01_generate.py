"""
Example 01: Generating Accessor Modules

This example runs one generation batch over the ``library`` package next to
this file and prints the generated BookModel module.
"""

import tempfile
from pathlib import Path

from fluent_modelgen import DiagnosticCollector, DirectoryFiler, ModelProcessor, discover_sources


def main():
    source_root = Path(__file__).parent
    out_dir = Path(tempfile.mkdtemp())

    processor = ModelProcessor(DirectoryFiler(out_dir), DiagnosticCollector())
    result = processor.process(
        unit for unit in discover_sources(source_root) if unit.module.startswith("library")
    )

    print("=== Generation Batch ===\n")
    print(f"Generated {len(result.generated)} modules into {out_dir}:")
    for module in result.generated:
        print(f"  - {module}")
    print(f"Failed: {result.failed}\n")

    print("=== library/book_model.py ===\n")
    print((out_dir / "library" / "book_model.py").read_text(encoding="utf-8"))


if __name__ == "__main__":
    main()
