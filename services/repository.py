"""Build the post/project/git services for one configuration."""

from dataclasses import dataclass

from config import PortfolioConfig
from services.backends import ContentBackend, GitHubBackend, LocalBackend
from services.git import GitGate
from services.posts import PostStore
from services.projects import ProjectStore


@dataclass
class Repository:
    backend: ContentBackend
    posts: PostStore
    projects: ProjectStore
    git: GitGate | None  # None for the GitHub backend: every write is already a commit


def make_backend(config: PortfolioConfig) -> ContentBackend:
    if config.backend == "github":
        return GitHubBackend(
            owner=config.github_owner,
            repo=config.github_repo,
            token=config.github_token,
            branch=config.github_branch,
            api_url=config.github_api_url,
        )
    return LocalBackend(config.portfolio_path)


def build_repository(config: PortfolioConfig, backend: ContentBackend | None = None) -> Repository:
    backend = backend or make_backend(config)
    git = None
    if config.backend == "local":
        git = GitGate(config.portfolio_path, remote=config.git_remote, branch=config.git_branch)
    return Repository(
        backend=backend,
        posts=PostStore(backend, config.posts_dir, extension=config.post_extension),
        projects=ProjectStore(backend, config.projects_file),
        git=git,
    )
