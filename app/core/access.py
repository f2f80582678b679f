"""Static access policy: a public allow-list, everything else needs a session."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AccessPolicy:
    """
    Two-rule policy. Paths in public_paths (exact match) or under one of
    public_prefixes are open; every other path requires an authenticated session.
    """

    public_paths: frozenset[str] = frozenset({"/", "/home"})
    public_prefixes: tuple[str, ...] = ()
    login_path: str = "/login"
    logout_path: str = "/logout"
    default_success_path: str = "/"
    extra_public_paths: frozenset[str] = field(default_factory=frozenset)

    def is_public(self, path: str) -> bool:
        if path in self.public_paths or path in self.extra_public_paths:
            return True
        if path in (self.login_path, self.logout_path):
            return True
        return any(
            path == prefix.rstrip("/") or path.startswith(prefix)
            for prefix in self.public_prefixes
        )

    def requires_authentication(self, path: str) -> bool:
        return not self.is_public(path)

    def safe_redirect_target(self, target: str | None) -> str:
        """Return target if it is a local path on this site, else the default success path."""
        if (
            not target
            or not target.startswith("/")
            or target.startswith("//")
            or "\\" in target
            or target.startswith(self.login_path)
        ):
            return self.default_success_path
        return target
