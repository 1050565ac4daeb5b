"""Configuration for the portfolio content server.

Environment variables win (cloud deployments set PORTFOLIO_PATH or
GITHUB_REPO); otherwise ``portfolio-content.yml`` in the working directory is
read. The resulting PortfolioConfig is passed explicitly to whatever needs it.
"""

import os
from dataclasses import dataclass, fields

import yaml

CONFIG_FILENAME = "portfolio-content.yml"
BACKENDS = ("local", "github")

# env var -> PortfolioConfig field
_ENV_FIELDS = {
    "PORTFOLIO_BACKEND": "backend",
    "PORTFOLIO_PATH": "portfolio_path",
    "POSTS_DIR": "posts_dir",
    "PROJECTS_FILE": "projects_file",
    "POST_EXTENSION": "post_extension",
    "GIT_REMOTE": "git_remote",
    "GIT_BRANCH": "git_branch",
    "GITHUB_OWNER": "github_owner",
    "GITHUB_REPO": "github_repo",
    "GITHUB_BRANCH": "github_branch",
    "GITHUB_TOKEN": "github_token",
    "GITHUB_API_URL": "github_api_url",
    "API_KEY": "api_key",
    "API_HOST": "host",
    "API_PORT": "port",
}


class ConfigError(Exception):
    pass


@dataclass
class PortfolioConfig:
    backend: str = "local"
    portfolio_path: str = ""
    posts_dir: str = "data/posts"
    projects_file: str = "data/projectsData.js"
    post_extension: str = ".mdx"
    git_remote: str = "origin"
    git_branch: str = "main"
    github_owner: str = ""
    github_repo: str = ""
    github_branch: str = "main"
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    api_key: str = ""
    host: str = "localhost"
    port: int = 3000

    def validate(self) -> "PortfolioConfig":
        if self.backend not in BACKENDS:
            raise ConfigError(f"backend must be one of {BACKENDS}, got {self.backend!r}")
        if self.backend == "local" and not self.portfolio_path:
            raise ConfigError("portfolio_path is required for the local backend")
        if self.backend == "github":
            missing = [
                name
                for name in ("github_owner", "github_repo", "github_token")
                if not getattr(self, name)
            ]
            if missing:
                raise ConfigError(f"GitHub backend requires: {', '.join(missing)}")
        if not self.posts_dir:
            raise ConfigError("posts_dir is required")
        if not self.projects_file:
            raise ConfigError("projects_file is required")
        try:
            self.port = int(self.port)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"port must be an integer, got {self.port!r}") from e
        return self


def _from_env(environ) -> PortfolioConfig | None:
    if not (environ.get("PORTFOLIO_PATH") or environ.get("GITHUB_REPO")):
        return None
    values = {field: environ[var] for var, field in _ENV_FIELDS.items() if environ.get(var)}
    # A GitHub repo without a local checkout implies the remote backend.
    if "backend" not in values and not values.get("portfolio_path"):
        values["backend"] = "github"
    return PortfolioConfig(**values)


def _from_file(path: str) -> PortfolioConfig:
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(
            f"Config file not found at {path}. Create it or set PORTFOLIO_PATH / GITHUB_REPO."
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(PortfolioConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return PortfolioConfig(**data)


def load_config(path: str | None = None, environ=None) -> PortfolioConfig:
    """Resolve configuration: explicit file, then env vars, then the default file."""
    environ = os.environ if environ is None else environ
    if path:
        return _from_file(path).validate()
    config = _from_env(environ)
    if config is None:
        config = _from_file(os.path.join(os.getcwd(), CONFIG_FILENAME))
    return config.validate()
