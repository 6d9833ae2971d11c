#!/usr/bin/env python3
"""
Cognitive Engine Demo

Demonstrates the core features without running as an MCP server.
"""

import sys
sys.path.insert(0, './src')

from cognitive_engine import think, verify
from cognitive_engine.server import CognitiveEngine
from cognitive_engine.storage import StorageConfig


def main():
    print("=" * 60)
    print("COGNITIVE ENGINE DEMO")
    print("=" * 60)

    print("\n1. Initializing (in-memory store)...")
    engine = CognitiveEngine(config=StorageConfig(in_memory=True))
    print("   ✓ Store, memory engine and insight engine created")

    print("\n2. Memory Operations...")
    engine.memory.remember("This project uses React with TypeScript", tags=["tech-stack"])
    engine.memory.remember("Database is PostgreSQL on port 5432", tags=["database", "config"])
    engine.memory.remember("Authentication uses JWT tokens", tags=["auth", "security"])
    print("   ✓ Stored 3 memories")

    for query in ["database", "jwt"]:
        results = engine.memory.recall(query)["memories"]
        print(f"   ✓ Recall '{query}': found {len(results)} matches")
        for r in results:
            print(f"      - #{r['id']} {r['content'][:50]} {r['tags']}")

    print("\n3. Lessons and Insights...")
    for _ in range(3):
        engine.insights.learn("coding", "use early return", "success")
    engine.insights.learn("coding", "ignore errors", "failure")
    insight = engine.insights.get_insights("coding")
    print(f"   Do this:    {insight['doThis']}")
    print(f"   Avoid this: {insight['avoidThis']}")
    print(f"   {insight['summary']}")

    print("\n4. Think...")
    result = think("Why does the login page load slowly after deploys?", depth=4)
    for step in result["steps"]:
        print(f"   {step}")
    print(f"   => {result['conclusion']} ({result['confidence']})")

    print("\n5. Verify...")
    result = verify(
        "Maybe it is the cache, perhaps the CDN, probably both.",
        criteria=["must include cache"],
        context="Why does the login page load slowly?"
    )
    print(f"   valid={result['valid']} score={result['score']}")
    for issue in result["issues"]:
        print(f"   - {issue}")

    print("\n6. Maintenance...")
    print(f"   {engine.dispatch('vacuum_db')}")
    engine.close()

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print("=" * 60)
    print("Run the MCP server with: cognitive-engine --namespace myproject")


if __name__ == "__main__":
    main()
