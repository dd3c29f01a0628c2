"""
Ordered URL rewriting for HTML and CSS bodies served from the origin.

This is a textual, best-effort rewrite and not a parser. Rules run in a fixed
order and each one sees the output of the previous one:

1. absolute origin URLs become absolute mounted URLs
2. root-relative ``href``/``src``/``action`` attributes get the mount prefix
   (outside ``<script>`` bodies only)
3. WordPress paths (``/wp-content/`` and friends) get the mount prefix anywhere
4. CSS ``url(/...)`` references
5. CSS ``@import "/..."`` statements
6. inline ``ajaxurl = "..."`` assignments
7. bare quoted origin URLs become the quoted mount prefix
8. JSON-escaped ``\\/wp-json\\/wp\\/v2\\/`` paths

Rule 2 must come after rule 1, otherwise rewritten absolute URLs would look
like unprefixed root-relative ones. Every rule skips text that is already
under the mount prefix so running the whole chain twice changes nothing.
"""

import re
from dataclasses import dataclass
from typing import Callable, Tuple, Union
from urllib.parse import urlparse

from blogmount.mount.config import MountConfig

Replacement = Union[str, Callable[["re.Match[str]"], str]]

# Only the body of a script element is protected; attributes of the opening
# tag (e.g. <script src="/x.js">) are still markup.
SCRIPT_BLOCK = re.compile(
    r"(<script\b[^>]*>)(.*?)(</script\s*>)", re.IGNORECASE | re.DOTALL
)

WORDPRESS_DIRS = ("wp-content", "wp-includes", "wp-json", "wp-admin")

# A path segment starting here is not root-relative when preceded by one of these
HOST_OR_PATH_CHAR = r"(?<![\w.\-])"


@dataclass(frozen=True)
class RewriteRule:
    name: str
    pattern: "re.Pattern[str]"
    replacement: Replacement
    skip_scripts: bool = False

    def apply(self, text: str) -> str:
        if not self.skip_scripts:
            return self.pattern.sub(self.replacement, text)
        return _sub_outside_scripts(self.pattern, self.replacement, text)


def _sub_outside_scripts(
    pattern: "re.Pattern[str]", replacement: Replacement, text: str
) -> str:
    parts = []
    pos = 0
    for block in SCRIPT_BLOCK.finditer(text):
        parts.append(pattern.sub(replacement, text[pos : block.end(1)]))
        parts.append(text[block.start(2) : block.end()])
        pos = block.end()
    parts.append(pattern.sub(replacement, text[pos:]))
    return "".join(parts)


def _not_under_prefix(prefix: str, terminators: str) -> str:
    """
    Lookahead placed right after a leading ``/``: rejects protocol-relative
    URLs and paths that already start with the mount prefix.
    """
    bare = re.escape(prefix.lstrip("/"))
    return f"(?!/|{bare}(?:[/?#{terminators}]|$))"


def origin_url_pattern(origin_base_url: str, escaped_slashes: bool = True) -> str:
    """
    Regex matching the origin base URL with either scheme, protocol-relative,
    and (optionally) with JSON-escaped slashes.
    """
    parsed = urlparse(origin_base_url)
    rest = parsed.netloc + parsed.path
    # Stop at the host boundary so blog.example.com does not match blog.example.community
    boundary = r"(?![\w\-]|\.\w)"
    plain = r"(?:https?:)?//" + re.escape(rest) + boundary
    if not escaped_slashes:
        return plain
    escaped = r"(?:https?:)?\\/\\/" + re.escape(rest.replace("/", "\\/")) + boundary
    return f"(?:{plain}|{escaped})"


def _absolute_origin_rule(config: MountConfig) -> RewriteRule:
    mounted = config.mounted_base_url
    mounted_escaped = mounted.replace("/", "\\/")

    def replace(match: "re.Match[str]") -> str:
        return mounted_escaped if "\\/" in match.group(0) else mounted

    return RewriteRule(
        name="absolute_origin_url",
        pattern=re.compile(origin_url_pattern(config.origin_base_url), re.IGNORECASE),
        replacement=replace,
    )


def _attribute_rule(config: MountConfig, quote: str) -> RewriteRule:
    prefix = config.mount_prefix
    pattern = re.compile(
        r"(?P<lead>\b(?:href|src|action)\s*=\s*)"
        + quote
        + "/"
        + _not_under_prefix(prefix, quote)
        + f"(?P<path>[^{quote}]*)"
        + quote,
        re.IGNORECASE,
    )

    def replace(match: "re.Match[str]") -> str:
        return f"{match.group('lead')}{quote}{prefix}/{match.group('path')}{quote}"

    name = "root_relative_attribute" + ("" if quote == '"' else "_single_quoted")
    return RewriteRule(name=name, pattern=pattern, replacement=replace, skip_scripts=True)


def _wordpress_paths_rule(config: MountConfig) -> RewriteRule:
    prefix = config.mount_prefix
    pattern = re.compile(
        HOST_OR_PATH_CHAR
        + f"(?<!{re.escape(prefix)})"
        + "/(?P<dir>"
        + "|".join(WORDPRESS_DIRS)
        + ")/"
    )
    return RewriteRule(
        name="wordpress_paths",
        pattern=pattern,
        replacement=lambda m: f"{prefix}/{m.group('dir')}/",
    )


def _css_url_rule(config: MountConfig) -> RewriteRule:
    prefix = config.mount_prefix
    pattern = re.compile(
        r"(?P<lead>url\(\s*)(?P<q>[\"']?)/"
        + _not_under_prefix(prefix, "\"')")
        + r"(?P<path>[^)\"']*)(?P=q)(?P<tail>\s*\))",
        re.IGNORECASE,
    )

    def replace(match: "re.Match[str]") -> str:
        q = match.group("q")
        return f"{match.group('lead')}{q}{prefix}/{match.group('path')}{q}{match.group('tail')}"

    return RewriteRule(name="css_url", pattern=pattern, replacement=replace)


def _css_import_rule(config: MountConfig) -> RewriteRule:
    prefix = config.mount_prefix
    pattern = re.compile(
        r"(?P<lead>@import\s+)(?P<q>[\"'])/"
        + _not_under_prefix(prefix, "\"'")
        + r"(?P<path>[^\"']*)(?P=q)",
        re.IGNORECASE,
    )

    def replace(match: "re.Match[str]") -> str:
        q = match.group("q")
        return f"{match.group('lead')}{q}{prefix}/{match.group('path')}{q}"

    return RewriteRule(name="css_import", pattern=pattern, replacement=replace)


def _ajax_url_rule(config: MountConfig) -> RewriteRule:
    target = f"{config.mount_prefix}/wp-admin/admin-ajax.php"
    return RewriteRule(
        name="ajax_url",
        pattern=re.compile(r"\bajaxurl\s*=\s*[\"'][^\"']*/wp-admin/admin-ajax\.php[\"']"),
        replacement=lambda m: f'ajaxurl = "{target}"',
    )


def _quoted_origin_rule(config: MountConfig) -> RewriteRule:
    # Rule 1 has already turned the origin into the mounted URL, so both forms count
    candidates = "|".join(
        [
            origin_url_pattern(config.origin_base_url, escaped_slashes=False),
            re.escape(config.mounted_base_url),
        ]
    )
    prefix = config.mount_prefix
    return RewriteRule(
        name="quoted_origin_url",
        pattern=re.compile(r"(?P<q>[\"'])(?:" + candidates + r")(?P=q)", re.IGNORECASE),
        replacement=lambda m: f"{m.group('q')}{prefix}{m.group('q')}",
    )


def _rest_api_rule(config: MountConfig) -> RewriteRule:
    prefix = config.mount_prefix
    escaped_prefix = prefix.replace("/", "\\/")
    pattern = re.compile(
        HOST_OR_PATH_CHAR
        + f"(?<!{re.escape(prefix)})(?<!{re.escape(escaped_prefix)})"
        + r"(?P<s>\\?/)wp-json(?P=s)wp(?P=s)v2(?P=s)"
    )

    def replace(match: "re.Match[str]") -> str:
        s = match.group("s")
        return prefix.replace("/", s) + match.group(0)

    return RewriteRule(name="rest_api_path", pattern=pattern, replacement=replace)


def build_rewrite_rules(config: MountConfig) -> Tuple[RewriteRule, ...]:
    """The rule sequence, in the order it must be applied."""
    return (
        _absolute_origin_rule(config),
        _attribute_rule(config, '"'),
        _attribute_rule(config, "'"),
        _wordpress_paths_rule(config),
        _css_url_rule(config),
        _css_import_rule(config),
        _ajax_url_rule(config),
        _quoted_origin_rule(config),
        _rest_api_rule(config),
    )


class RewriteEngine:
    """Applies the rule chain to text bodies and fixes ``Location`` headers."""

    def __init__(self, config: MountConfig):
        self.config = config
        self.rules = build_rewrite_rules(config)
        self._location_origin = re.compile(
            origin_url_pattern(config.origin_base_url, escaped_slashes=False),
            re.IGNORECASE,
        )
        self._relative_location = re.compile(
            "^/" + _not_under_prefix(config.mount_prefix, "")
        )

    def rewrite(self, text: str) -> str:
        for rule in self.rules:
            text = rule.apply(text)
        return text

    def rewrite_location(self, location: str) -> str:
        if not location:
            return location
        location = self._location_origin.sub(self.config.mounted_base_url, location)
        if self._relative_location.match(location):
            location = f"{self.config.mount_prefix}{location}"
        return location
