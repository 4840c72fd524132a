"""
Example 03: Diagnostics and Options

This example feeds a batch with broken entity sources and shows how every
problem ends up as a diagnostic while the rest of the batch is generated.
"""

import logging
import textwrap

from fluent_modelgen import DiagnosticCollector, MemoryFiler, ModelProcessor, SourceUnit

SOURCE = textwrap.dedent("""
    from typing import Annotated

    from fluent_modelgen.markers import Id, ManyToOne, entity

    @entity
    class Draft:
        title: str

    @entity
    class Review:
        id: Annotated[int, Id]
        shelf: Annotated["Shelf", ManyToOne]

    @entity
    class Reader:
        id: Annotated[int, Id]
        name: str

    @entity
    class Archive:
        id: Annotated[int, Id]
""")


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    filer = MemoryFiler()
    collector = DiagnosticCollector()
    processor = ModelProcessor.from_mapping(
        filer,
        collector,
        {"skip": "Archive", "debug": "true", "addGeneratedAnnotation": "false"},
    )
    result = processor.process([
        SourceUnit(module="club.models", text=SOURCE),
        SourceUnit(module="club.broken", text="class Broken(:\n"),
    ])

    print("\n=== Diagnostics ===\n")
    for diagnostic in result.diagnostics:
        print(f"  {diagnostic}")

    print(f"\nGenerated: {list(result.generated)}")
    print(f"Failed: {result.failed}")


if __name__ == "__main__":
    main()
