from .dsl import job, JobBuilder, build
from .env import Env
from .errors import JobError, DecodeError, EncodeError, EncodingError, ExecutionFailure
from .model import Job, COMMAND_NOT_FOUND

__all__ = [
    "job", "JobBuilder", "build", "Env", "Job", "COMMAND_NOT_FOUND",
    "JobError", "DecodeError", "EncodeError", "EncodingError", "ExecutionFailure",
]
