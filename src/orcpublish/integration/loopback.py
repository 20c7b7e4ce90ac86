"""In-process provider that accepts every import.

Used when no downstream URL is configured (local CLI runs) and in tests.
Each accepted request gets the next application id; the returned content
is the request payload serialized as JSON.
"""

from __future__ import annotations

import itertools
import json
import threading

from orcpublish.integration.protocol import ImportRequestRef, RefJobContentResponse


class LoopbackImportProvider:
    def __init__(self, first_app_id: int = 1) -> None:
        self._ids = itertools.count(first_app_id)
        self._lock = threading.Lock()
        self.received: list[ImportRequestRef] = []

    def import_ref(self, request: ImportRequestRef) -> RefJobContentResponse:
        with self._lock:
            app_id = next(self._ids)
            self.received.append(request)
        content = json.dumps(request.to_payload(), sort_keys=True)
        return RefJobContentResponse(app_id=app_id, content=content)
