from .company import CompanyModel
from .job import JobModel

__all__ = ["CompanyModel", "JobModel"]
