"""Upload queues for pushing fixture content to the server under test.

All queues implement the UploadQueue protocol defined in base.py.

Available Queues:
    - HttpUploadQueue: Git LFS batch API with concurrent basic transfers
"""

from lfs_compliance.transfer.base import Uploadable, UploadQueue, UploadQueueFactory, new_uploadable
from lfs_compliance.transfer.http import HttpUploadQueue, http_queue_factory

__all__ = [
    "Uploadable",
    "UploadQueue",
    "UploadQueueFactory",
    "new_uploadable",
    "HttpUploadQueue",
    "http_queue_factory",
]
