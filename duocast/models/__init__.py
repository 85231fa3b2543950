"""
SQLAlchemy models.
"""
from duocast.models.job import Base, Job, JobStatus

__all__ = ['Base', 'Job', 'JobStatus']
