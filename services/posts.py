"""Blog post operations: one frontmatter document per slug."""

import logging
import posixpath

from services.backends import ContentBackend
from services.errors import AlreadyExists, NotFound, ValidationError
from services.frontmatter import parse_frontmatter, render_document, slugify
from services.schema import validate_frontmatter

log = logging.getLogger(__name__)


class PostStore:
    def __init__(self, backend: ContentBackend, posts_dir: str, extension: str = ".mdx"):
        self.backend = backend
        self.posts_dir = posts_dir
        self.extension = extension

    def _path(self, slug: str) -> str:
        if not slug or "/" in slug or slug != slug.strip() or slug.startswith("."):
            raise ValidationError(f"Invalid slug: {slug!r}")
        return posixpath.join(self.posts_dir, f"{slug}{self.extension}")

    def _read(self, slug: str) -> tuple[dict, str | None]:
        """Return (post, token). NotFound is re-raised naming the slug."""
        try:
            raw, token = self.backend.read_file(self._path(slug))
        except NotFound as e:
            raise NotFound(f"Post not found: {slug}") from e
        frontmatter, body = parse_frontmatter(raw)
        return {"slug": slug, "frontmatter": frontmatter, "content": body}, token

    def _exists(self, slug: str) -> bool:
        try:
            self.backend.read_file(self._path(slug))
        except NotFound:
            return False
        return True

    def list_posts(self) -> list[dict]:
        """Read every post in the posts directory, sorted by slug."""
        try:
            names = self.backend.list_files(self.posts_dir)
        except NotFound:
            # git does not track empty directories, so no directory means no posts
            return []
        names = [n for n in names if n.endswith(self.extension)]
        slugs = sorted(n[: -len(self.extension)] for n in names)
        results = self.backend.read_files([self._path(s) for s in slugs])

        posts = []
        for slug, (raw, _token) in zip(slugs, results):
            frontmatter, body = parse_frontmatter(raw)
            posts.append({"slug": slug, "frontmatter": frontmatter, "content": body})
        return posts

    def get_post(self, slug: str) -> dict:
        post, _token = self._read(slug)
        return post

    def create_post(self, frontmatter: dict, content: str = "") -> dict:
        errors = validate_frontmatter(frontmatter)
        if errors:
            raise ValidationError("Frontmatter validation failed", errors)

        slug = slugify(frontmatter["title"])
        if not slug:
            raise ValidationError(f"Title {frontmatter['title']!r} does not produce a usable slug")
        if self._exists(slug):
            raise AlreadyExists(f"Post already exists: {slug}")

        fm = dict(frontmatter)
        self.backend.write_file(
            self._path(slug),
            render_document(fm, content or ""),
            message=f"Create post: {fm['title']}",
        )
        log.info("Created post %s", slug)
        return {"slug": slug, "frontmatter": fm, "content": (content or "").strip()}

    def update_post(self, slug: str, updates: dict, content: str | None = None) -> dict:
        """Shallow-merge ``updates`` into the post; replace the body only if given."""
        errors = validate_frontmatter(updates, partial=True)
        if errors:
            raise ValidationError("Frontmatter validation failed", errors)

        post, token = self._read(slug)
        fm = {**post["frontmatter"], **updates}

        body = content if content is not None else post["content"]
        self.backend.write_file(
            self._path(slug),
            render_document(fm, body),
            token=token,
            message=f"Update post: {slug}",
        )
        log.info("Updated post %s", slug)
        return {"slug": slug, "frontmatter": fm, "content": body.strip()}

    def delete_post(self, slug: str) -> None:
        _post, token = self._read(slug)
        self.backend.delete_file(self._path(slug), token=token, message=f"Delete post: {slug}")
        log.info("Deleted post %s", slug)
