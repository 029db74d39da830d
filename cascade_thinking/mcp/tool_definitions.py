"""MCP tool schema definitions for cascade thinking.

The Tool() below defines the name, description, and JSON Schema of the
single ``cascade_thinking`` tool. Validators and handlers live in
cascade_thinking.mcp.handlers.
"""

from mcp.types import Tool

from cascade_thinking.core.utils import (
    DEFAULT_RECENT_THOUGHTS_LIMIT,
    MAX_RECENT_THOUGHTS_LIMIT,
)
from cascade_thinking.types import ResponseMode

TOOL_NAME = "cascade_thinking"

VALID_RESPONSE_MODES = [mode.value for mode in ResponseMode]

TOOL_DESCRIPTION = """Dynamic problem-solving through structured cascade thinking with revisions and branches.

## Thought Reference Format
Every thought has two numbers:
- S{n}: position inside the current sequence ("S1", "S2", ...), resets for each sequence
- A{n}: absolute position across all thoughts ("A1", "A47", ...), never resets
Prefixes are case-insensitive ("s1" == "S1").

## When to Use
- Multi-step problems whose scope emerges as you go
- Work that needs revision, backtracking or comparing alternatives
- Several tools or agents contributing to one line of reasoning

## Core Concepts
1. Sequences: groups of related thoughts, each starting at S1
2. Revisions: revisesThought + isRevision point back at an earlier thought
3. Branches: branchFromThought + branchId fork a new sequence that inherits the recent context
4. Branch navigation: switchToBranch resumes a branch, or "main"
5. Shared state: thoughts persist across calls; gaps left by other tools are reported
6. Multiple agents must use unique toolSource values such as "agent:1", "agent:2"

## Required Parameters
- thought: your current thinking step
- thoughtNumber: your position in the current sequence ("S1", "S2", ...); may be omitted with switchToBranch
- totalThoughts: estimated number of thoughts (integer >= 1)
- nextThoughtNeeded: whether another thought follows

## Optional Parameters
- startNewSequence / sequenceDescription: open a new sequence
- isRevision / revisesThought ("A47" or "S3")
- branchFromThought ("A23" or "S2") / branchId / branchDescription
- switchToBranch: "main" or a branch id; cannot be combined with startNewSequence
- needsMoreThoughts: grow totalThoughts by 50% (at least 3)
- recentThoughtsLimit: 0-100 recent thoughts in the response (default 5)
- retrieveThoughts: "last:N", "A10-A15", "S3-S7" or "A3,A17,S5"
- toolSource: who is calling ("user", "agent:1", "task:auth", ...)
- isolatedContext: keep this toolSource's thoughts in private state
- responseMode: "minimal", "standard" (default) or "verbose"

## Response Fields
- thoughtNumber / absoluteThoughtNumber: "S{n}" / "A{n}" of the accepted thought
- expectedThoughtNumber: the next position, when nextThoughtNeeded is true
- hint: where you are and what exists around you
- currentSequence, recentThoughts, currentBranch, availableBranches (standard and verbose)
- gapInfo: thoughts other tools added since your last one
- sequenceHistory, branches, branchTree (verbose)
- needsMoreThoughts / adjustedTotalThoughts after an expansion
- retrievedThoughts when retrieveThoughts was given

## Examples
Start: { "thought": "Analyzing the auth flow", "thoughtNumber": "S1", "totalThoughts": 5, "nextThoughtNeeded": true }
Revise: { "thought": "Validation is more complex", "thoughtNumber": "S3", "revisesThought": "S2", "isRevision": true, "totalThoughts": 5, "nextThoughtNeeded": true }
Branch: { "thought": "What about OAuth?", "thoughtNumber": "S1", "branchFromThought": "S2", "branchId": "oauth", "branchDescription": "OAuth exploration", "totalThoughts": 4, "nextThoughtNeeded": true }
Return: { "thought": "Back to sessions", "switchToBranch": "main", "totalThoughts": 5, "nextThoughtNeeded": true }
New topic: { "thought": "Now the schema", "thoughtNumber": "S1", "startNewSequence": true, "sequenceDescription": "Database analysis", "totalThoughts": 4, "nextThoughtNeeded": true }

Use isolatedContext: true only when you need completely separate thinking state."""

CASCADE_THINKING_TOOL = Tool(
    name=TOOL_NAME,
    description=TOOL_DESCRIPTION,
    inputSchema={
        "type": "object",
        "properties": {
            "thought": {
                "type": "string",
                "description": "Your current thinking step",
            },
            "nextThoughtNeeded": {
                "type": "boolean",
                "description": "Whether another thought step is needed",
            },
            "thoughtNumber": {
                "type": "string",
                "pattern": "^[Ss]\\d+$",
                "description": "Position in the current sequence (e.g. 'S1', 'S2'). Optional with switchToBranch.",
            },
            "totalThoughts": {
                "type": "integer",
                "description": "Estimated total thoughts needed",
                "minimum": 1,
            },
            "isRevision": {
                "type": "boolean",
                "description": "Whether this revises previous thinking",
            },
            "revisesThought": {
                "type": "string",
                "pattern": "^[AaSs]\\d+$",
                "description": "Thought being reconsidered ('A47' absolute or 'S3' in current sequence)",
            },
            "branchFromThought": {
                "type": "string",
                "pattern": "^[AaSs]\\d+$",
                "description": "Branching point ('A23' absolute or 'S2' in current sequence)",
            },
            "branchId": {
                "type": "string",
                "description": "Branch identifier",
            },
            "branchDescription": {
                "type": "string",
                "description": "What this branch explores",
            },
            "needsMoreThoughts": {
                "type": "boolean",
                "description": "Expand totalThoughts by 50% (minimum 3)",
            },
            "responseMode": {
                "type": "string",
                "enum": VALID_RESPONSE_MODES,
                "description": "Response verbosity (default: standard)",
                "default": ResponseMode.STANDARD.value,
            },
            "startNewSequence": {
                "type": "boolean",
                "description": "Begin a new sequence",
            },
            "sequenceDescription": {
                "type": "string",
                "description": "What the new sequence explores",
            },
            "toolSource": {
                "type": "string",
                "description": "Which tool is calling ('user', 'agent:1', 'task:auth', ...)",
            },
            "isolatedContext": {
                "type": "boolean",
                "description": "Use state private to this toolSource",
            },
            "switchToBranch": {
                "type": "string",
                "description": "Resume work on a branch ('main' or a branch id)",
            },
            "recentThoughtsLimit": {
                "type": "integer",
                "description": f"Recent thoughts to include (default: {DEFAULT_RECENT_THOUGHTS_LIMIT})",
                "minimum": 0,
                "maximum": MAX_RECENT_THOUGHTS_LIMIT,
                "default": DEFAULT_RECENT_THOUGHTS_LIMIT,
            },
            "retrieveThoughts": {
                "type": "string",
                "description": "Retrieve thoughts: 'last:N', 'A10-A15', 'S3-S7' or 'A3,A17,S5'",
            },
        },
        "required": ["thought", "nextThoughtNeeded", "totalThoughts"],
    },
)

TOOLS = [CASCADE_THINKING_TOOL]
