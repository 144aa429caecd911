"""Runtime environment detection."""

import logging

from emfkit.adapters.environment.default import DefaultEnvironment
from emfkit.adapters.environment.ec2 import EC2Environment
from emfkit.adapters.environment.ecs import ECSEnvironment
from emfkit.adapters.environment.lambda_env import LambdaEnvironment
from emfkit.adapters.environment.local import LocalEnvironment
from emfkit.core.config import Configuration, get_config
from emfkit.core.ports import EnvironmentPort

logger = logging.getLogger(__name__)

_OVERRIDES = {
    "agent": DefaultEnvironment,
    "default": DefaultEnvironment,
    "ec2": EC2Environment,
    "ecs": ECSEnvironment,
    "lambda": LambdaEnvironment,
    "local": LocalEnvironment,
}


class EnvironmentDetector:
    """Resolves and caches the environment the process runs in.

    An override in ``Configuration.environment`` wins. Otherwise Lambda, ECS
    and EC2 are probed in that order, falling back to DefaultEnvironment.

    Args:
        config: Library configuration.
        candidates: Environments to probe, in order. Defaults to Lambda, ECS, EC2.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        candidates: list[EnvironmentPort] | None = None,
    ) -> None:
        self.config = config or get_config()
        self._candidates = candidates
        self._environment: EnvironmentPort | None = None

    def _default_candidates(self) -> list[EnvironmentPort]:
        return [
            LambdaEnvironment(self.config),
            ECSEnvironment(self.config),
            EC2Environment(self.config),
        ]

    async def resolve(self) -> EnvironmentPort:
        """Return the cached environment, detecting it on first call."""
        if self._environment is not None:
            return self._environment

        override = self.config.environment.strip().lower()
        if override in _OVERRIDES:
            self._environment = _OVERRIDES[override](self.config)
            logger.debug("Environment override supplied: %s", override)
            return self._environment
        if override:
            logger.warning("Unknown environment override %r, detecting", override)

        candidates = (
            self._candidates
            if self._candidates is not None
            else self._default_candidates()
        )
        for candidate in candidates:
            logger.debug("Testing: %s", type(candidate).__name__)
            if await candidate.probe():
                self._environment = candidate
                break

        if self._environment is None:
            self._environment = DefaultEnvironment(self.config)

        logger.debug("Using Environment: %s", type(self._environment).__name__)
        return self._environment

    def reset(self) -> None:
        """Forget the detected environment."""
        self._environment = None
