"""The API endpoint that triggers container update scans."""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable
from typing import Optional

from watchtower.api import ApiRequest, ApiResponse

_log = logging.getLogger(__name__)

UPDATE_PATH = "/v1/update"


class UpdateHandler:
    """Runs an update when requested, one at a time, sharing a lock with the scheduler."""

    def __init__(
        self,
        update_fn: Callable[[Optional[list[str]]], None],
        update_lock: Optional[threading.Lock] = None,
    ) -> None:
        self.fn = update_fn
        self.lock = update_lock if update_lock is not None else threading.Lock()
        self.path = UPDATE_PATH

    def handle(self, request: ApiRequest) -> ApiResponse:
        """Trigger an update; targeted updates wait for the lock, full ones are skipped if busy."""
        _log.info("Updates triggered by HTTP API request.")

        if request.body:
            sys.stdout.write(request.body.decode("utf-8", errors="replace"))
            sys.stdout.flush()

        images: Optional[list[str]] = None
        if "image" in request.query:
            images = [image for value in request.query["image"] for image in value.split(",")]

        if images:
            with self.lock:
                self.fn(images)
        elif self.lock.acquire(blocking=False):
            try:
                self.fn(images)
            finally:
                self.lock.release()
        else:
            _log.debug("Skipped. Another update already running.")

        return ApiResponse()