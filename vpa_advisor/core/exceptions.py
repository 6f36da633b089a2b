"""
Error taxonomy shared by both jobs
"""
from typing import Optional


class VPAAdvisorError(Exception):
    """Base exception for all VPA advisor errors"""
    pass


class ClusterQueryError(VPAAdvisorError):
    """A list or get call against the cluster failed"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ResourceNotFoundError(ClusterQueryError):
    """The requested object does not exist in the cluster"""

    def __init__(self, message: str):
        super().__init__(message, status=404)


class ClusterWriteError(VPAAdvisorError):
    """Creating an object in the cluster failed"""
    pass


class OutputWriteError(VPAAdvisorError):
    """The report could not be written"""
    pass


class ConfigError(VPAAdvisorError):
    """Malformed environment or command line input"""
    pass
