"""
Domain models — pydantic types for the provisioning core.

All models are re-exported here for convenient access:

    from catana.core.models import Step, Probe, StepResult, BatchReport
"""

from catana.core.models.action import (
    ACTION_KINDS,
    Action,
    CloneRepoAction,
    ContainerLaunchAction,
    FilePatchAction,
    Invocation,
    PackageAction,
    PipInstallAction,
    ShellAction,
    VenvCreateAction,
)
from catana.core.models.result import BatchReport, ReconcileResult, StepResult
from catana.core.models.step import Bundle, Probe, Step

__all__ = [
    # action.py
    "ACTION_KINDS",
    "Action",
    # result.py
    "BatchReport",
    # step.py
    "Bundle",
    "CloneRepoAction",
    "ContainerLaunchAction",
    "FilePatchAction",
    "Invocation",
    "PackageAction",
    "PipInstallAction",
    "Probe",
    "ReconcileResult",
    "ShellAction",
    "Step",
    "StepResult",
    "VenvCreateAction",
]
