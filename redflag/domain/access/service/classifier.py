"""Route classifier: path prefix -> RouteClass."""

from collections.abc import Sequence

from redflag.domain.access.model.value import RouteClass, RouteRule

AUTH_NAMESPACE = "/api/auth"

PUBLIC_PATHS = ("/login", "/register", "/privacy", "/terms", "/ping")

STATIC_PREFIXES = ("/_next", "/static", "/favicon.ico", "/sitemap.xml", "/robots.txt")

# Most specific first; first match wins
DEFAULT_RULES: tuple[RouteRule, ...] = (
    RouteRule(AUTH_NAMESPACE, RouteClass.AUTH_ENDPOINT),
    *(RouteRule(p, RouteClass.PUBLIC) for p in PUBLIC_PATHS),
    *(RouteRule(p, RouteClass.PUBLIC) for p in STATIC_PREFIXES),
)


class RouteClassifier:
    """Evaluates an ordered rule list against a request path.

    Matching is by case-sensitive prefix in list order and the first match
    wins; paths matching no rule are PROTECTED. Later rules never override
    an earlier match, so overlapping prefixes must be listed most specific
    first.
    """

    def __init__(self, rules: Sequence[RouteRule] = DEFAULT_RULES) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[RouteRule, ...]:
        return self._rules

    def classify(self, path: str) -> RouteClass:
        for rule in self._rules:
            if rule.matches(path):
                return rule.route_class
        return RouteClass.PROTECTED
