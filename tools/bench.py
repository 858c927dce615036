#!/usr/bin/env python3
"""
Benchmark: nodes and time per search at a fixed depth.

One console process replays each opening with "move" commands, asks for
"go depth N" and reads back the "info" line. "newgame" resets the board
between openings. Entanglement runs on every simulated move, so a slower
resolver shows up directly as fewer nodes per second.

Usage: python3 tools/bench.py [depth]
"""
import os
import subprocess
import sys

REPO = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

OPENINGS = {
    "start": [],
    "pawn push": ["a2a3"],
    "knights out": ["b2c4", "g7f5"],
    "open centre": ["d2d4", "e7e5", "e2e3"],
    "first trade": ["d2d4", "e7e5", "d4e5"],
}


def read_reply(console: subprocess.Popen) -> dict[str, str]:
    """Consume lines up to "bestmove"; return the info fields plus the move."""
    fields: dict[str, str] = {}
    for line in console.stdout:
        tokens = line.split()
        if not tokens:
            continue
        if tokens[0] == "illegal":
            print("  " + line.strip(), file=sys.stderr)
        elif tokens[0] == "info":
            fields.update(zip(tokens[1::2], tokens[2::2]))
        elif tokens[0] == "bestmove":
            fields["move"] = tokens[1]
            break
    return fields


def main() -> None:
    depth = int(sys.argv[1]) if len(sys.argv) > 1 else 2
    console = subprocess.Popen(
        [sys.executable, "-m", "interface.console"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        text=True,
        cwd=REPO,
        env={**os.environ, "PYTHONPATH": REPO},
    )

    total_nodes = total_ms = 0
    print(f"depth {depth}")
    for name, moves in OPENINGS.items():
        script = ["newgame"] + [f"move {m}" for m in moves] + [f"go depth {depth}", "wait"]
        console.stdin.write("".join(line + "\n" for line in script))
        console.stdin.flush()

        fields = read_reply(console)
        nodes = int(fields.get("nodes", 0))
        elapsed = int(fields.get("time", 0))
        total_nodes += nodes
        total_ms += elapsed
        print(
            f"{name:<12} {fields.get('move', '(none)'):<6} score {fields.get('score', '-'):>7} "
            f"nodes {nodes:>8,} {elapsed:>7,} ms"
        )

    console.stdin.write("quit\n")
    console.stdin.flush()
    console.wait(timeout=5)
    print(f"total nodes {total_nodes:,} in {total_ms:,} ms ({total_nodes * 1000 // max(1, total_ms):,} nps)")


if __name__ == "__main__":
    main()
