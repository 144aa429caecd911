"""Runtime environment adapters implementing EnvironmentPort."""

from emfkit.adapters.environment.default import DefaultEnvironment
from emfkit.adapters.environment.detector import EnvironmentDetector
from emfkit.adapters.environment.ec2 import EC2Environment
from emfkit.adapters.environment.ecs import ECSEnvironment
from emfkit.adapters.environment.lambda_env import LambdaEnvironment
from emfkit.adapters.environment.local import LocalEnvironment

__all__ = [
    "DefaultEnvironment",
    "EC2Environment",
    "ECSEnvironment",
    "EnvironmentDetector",
    "LambdaEnvironment",
    "LocalEnvironment",
]
