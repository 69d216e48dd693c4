"""Orphan rule per source, plus descriptions for ``--explain``."""

from ..models import ToolSource
from . import npm_bin, pip_required

ORPHAN_RULES = {
    ToolSource.NPM: npm_bin.check,
    ToolSource.PIP: pip_required.check,
}

RULE_INFO = {
    npm_bin.RULE_ID: {
        "source": "npm",
        "description": "Globally installed npm package that exposes no executable.",
        "when": "package.json (or registry metadata) has no \"bin\" entry and the name is not common tooling.",
        "fix": "npm uninstall -g <name>, or install it into the project that uses it.",
    },
    pip_required.RULE_ID: {
        "source": "pip",
        "description": "pip package that no other installed package depends on.",
        "when": "pip show lists no Required-by for it and no package lists it under Requires.",
        "fix": "pip uninstall <name> if you did not install it on purpose.",
    },
}
