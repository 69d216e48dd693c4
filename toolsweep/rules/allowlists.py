"""Common tooling that is expected to be installed standalone.

Fixed per source. Config can add names but never remove these.
"""

from ..models import ToolSource

NPM_COMMON_TOOLS = frozenset({
    "npm", "pnpm", "yarn", "typescript", "ts-node",
    "eslint", "prettier", "webpack", "vite", "create-react-app",
    "create-vite", "nodemon", "pm2", "serve", "http-server",
    "npx", "corepack", "nx", "turbo", "lerna",
})

PIP_COMMON_TOOLS = frozenset({
    "pip", "setuptools", "wheel", "virtualenv", "pipenv",
    "poetry", "black", "flake8", "pylint", "mypy",
    "pytest", "ipython", "jupyter", "notebook",
})

ALLOW_LISTS: dict[ToolSource, frozenset[str]] = {
    ToolSource.NPM: NPM_COMMON_TOOLS,
    ToolSource.PIP: PIP_COMMON_TOOLS,
}


def allow_list(source: ToolSource, extra: frozenset[str] = frozenset()) -> frozenset[str]:
    return ALLOW_LISTS.get(source, frozenset()) | extra
