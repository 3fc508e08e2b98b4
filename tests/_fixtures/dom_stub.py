"""Runs generated loop renderers under node against a minimal DOM stub."""

from __future__ import annotations

import json
import shutil
import subprocess
from pathlib import Path
from typing import Any

NODE = shutil.which("node")

# One placeholder whose parent keeps rendered items as markup strings.
DOM_STUB = """
const parent = {
  nodes: [],
  querySelectorAll(selector) {
    return this.nodes.slice().map((node) => ({
      remove: () => {
        this.nodes.splice(this.nodes.indexOf(node), 1);
      },
    }));
  },
  insertBefore(fragment, anchor) {
    this.nodes.push(...fragment.nodes);
  },
};
const document = {
  readyState: 'loading',
  addEventListener() {},
  querySelector(selector) {
    return {
      replaceWith(anchor) {
        anchor.parentNode = parent;
      },
    };
  },
  querySelectorAll(selector) {
    return [];
  },
  createComment(text) {
    return { text: text, parentNode: null };
  },
  createElement(tag) {
    return {
      content: { nodes: [] },
      set innerHTML(markup) {
        this.content = { nodes: markup ? [markup] : [] };
      },
    };
  },
};
function rendered() {
  return parent.nodes.join('');
}
"""


def run_with_dom(tmp_path: Path, prelude: str, code: str, steps: str) -> Any:
    """Execute ``code`` after the DOM stub and ``prelude``; ``steps`` prints JSON."""
    script = tmp_path / "runtime.js"
    script.write_text("\n".join([DOM_STUB, prelude, code, steps]), encoding="utf-8")
    completed = subprocess.run(
        [NODE or "node", str(script)],
        capture_output=True,
        text=True,
        check=True,
        timeout=30,
    )
    return json.loads(completed.stdout)


__all__ = ["NODE", "run_with_dom"]
