from redis import Redis
from rq import Queue
from regproc.settings import settings


def get_queue(name: str) -> Queue:
    conn = Redis.from_url(settings.REDIS_URL)
    return Queue(name, connection=conn, default_timeout=settings.RQ_JOB_TIMEOUT_SEC)
