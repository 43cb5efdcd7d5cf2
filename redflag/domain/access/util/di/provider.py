"""DI provider for the access gate."""

from dishka import provide

from redflag.config import Config
from redflag.domain.access.service.classifier import RouteClassifier
from redflag.domain.access.service.gate import AccessGate
from redflag.domain.auth.service.session import SessionResolver
from redflag.util.di.base import Provider
from redflag.util.di.scope import Scope


class AccessProvider(Provider):
    @provide(scope=Scope.APP)
    def get_classifier(self) -> RouteClassifier:
        return RouteClassifier()

    @provide(scope=Scope.APP)
    def get_access_gate(
        self, config: Config, classifier: RouteClassifier, resolver: SessionResolver
    ) -> AccessGate:
        guest = config.auth.guest
        return AccessGate(
            _classifier=classifier,
            _resolver=resolver,
            _guest_endpoint=guest.endpoint if guest.enabled else None,
            _login_path=config.auth.login_path,
            _home_path=config.server.home_path,
        )
