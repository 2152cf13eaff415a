#!/usr/bin/env python3
"""
Basic pipeline example showing how SemTreeLib cleans up loosely typed JSON.

This example demonstrates:
- Loading JSON into the XNode tree
- Branching on a subset of nodes, converting them and merging back
- Tree statistics from the functional API
"""

import json
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from semtreelib import LogLevel, TreePipeline, configure_logging
from semtreelib.api import get_tree_stats
from semtreelib.transforms import compose, regex, to_boolean, to_number

SAMPLE = {
    "orders": [
        {"@id": "1001", "customer": "  Ann   Lee ", "total": "1,250.50", "paid": "yes"},
        {"@id": "1002", "customer": "Bob", "total": "99.9", "paid": "no"},
    ]
}


def main():
    """Normalize an order export."""
    if "-v" in sys.argv:
        configure_logging(LogLevel.DEBUG)

    data = SAMPLE
    if len(sys.argv) > 1 and not sys.argv[-1].startswith("-"):
        data = json.loads(Path(sys.argv[-1]).read_text())

    pipeline = TreePipeline().from_json(data)

    stats = get_tree_stats(pipeline.to_xnode())
    print(f"Loaded {stats['total_nodes']} nodes, max depth {stats['max_depth']}")
    print("-" * 50)

    result = (pipeline
              .branch(lambda n: n.name == "customer")
              .map(compose(regex(r"/^\s+|\s+$/g", ""), regex(r"/\s+/g", " ")))
              .merge()
              .branch(lambda n: n.name == "total")
              .map(to_number(precision=2))
              .merge()
              .branch(lambda n: n.name == "paid")
              .map(to_boolean())
              .merge()
              .to_json_string())

    print(result)


if __name__ == "__main__":
    main()
