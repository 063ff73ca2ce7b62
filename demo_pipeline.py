#!/usr/bin/env python3
"""
Pipeline Demo: Source → Tokens → Syntax Tree → Diagnostics → Report

Shows the full workflow on a small, deliberately untidy snippet:
1. Tokenize the source
2. Parse it into a syntax tree
3. Run the style rules
4. Render the report in every output format
"""

from luastyle.diagnostics import summarize
from luastyle.lexer import tokenize
from luastyle.linter import lint_source
from luastyle.parser import parse
from luastyle.reporters import ReportFormat, render
from luastyle.syntax import walk


SAMPLE = """\
local Players = game:GetService('Players')
local max_health=100

local on_join = function(player)
    if (player.UserId > 0) then
        print( player.Name )
    end
end

local config = {
\tname = "demo",
\tsize = 3
}
"""


def main():
    print("=" * 80)
    print("PIPELINE DEMO: Source → Tokens → Tree → Diagnostics → Report")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Tokenize
    # =========================================================================
    print("\n1. TOKENIZING...")
    tokens = tokenize(SAMPLE)
    print(f"   ✓ Tokens: {len(tokens)}")

    # =========================================================================
    # STEP 2: Parse
    # =========================================================================
    print("\n2. PARSING...")
    chunk = parse(SAMPLE)
    nodes = list(walk(chunk.body))
    print(f"   ✓ Top-level statements: {len(chunk.body.statements)}")
    print(f"   ✓ Syntax nodes: {len(nodes)}")

    # =========================================================================
    # STEP 3: Lint
    # =========================================================================
    print("\n3. LINTING...")
    report = lint_source(SAMPLE, path="sample.lua")
    summary = summarize([report])
    print(f"   ✓ Problems: {summary.total}")
    for rule_id, count in summary.by_rule.items():
        print(f"      - {rule_id}: {count}")

    # =========================================================================
    # STEP 4: Report
    # =========================================================================
    for fmt in ReportFormat:
        print(f"\n4. {fmt.value.upper()} OUTPUT:")
        print("-" * 80)
        output = render([report], fmt, show_source=True, sources={"sample.lua": SAMPLE})
        lines = output.splitlines()
        for line in lines[:20]:
            print(f"   {line}")
        if len(lines) > 20:
            print(f"   ... ({len(lines) - 20} more lines)")


if __name__ == "__main__":
    main()
