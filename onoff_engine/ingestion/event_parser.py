"""
Lifecycle event batch parser for the OnOff Engine.

OneLogin delivers webhook events as a JSON array of objects. Only the
structure is validated here: unknown fields are dropped and missing
fields take their zero values.
"""

import json
import logging
from typing import Any, List, Union

from pydantic import ValidationError

from ..errors import StructuralError
from ..models import LifecycleEvent

logger = logging.getLogger(__name__)


def parse_event_batch(data: Union[str, bytes, List[Any], None]) -> List[LifecycleEvent]:
    """
    Parse a raw webhook batch into LifecycleEvent objects.

    Args:
        data: Request body (str or bytes) or an already decoded JSON value

    Returns:
        Events in batch order

    Raises:
        StructuralError: If the payload is not a JSON array of objects
    """
    if isinstance(data, (str, bytes, bytearray)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StructuralError(f"Error decoding event batch: {e}") from e

    # A JSON null decodes to an empty batch
    if data is None:
        logger.info("Received empty event batch")
        return []

    if not isinstance(data, list):
        raise StructuralError(f"Event batch must be a JSON array, got {type(data).__name__}")

    events = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise StructuralError(f"Event {index} must be a JSON object, got {type(item).__name__}")
        try:
            events.append(LifecycleEvent.model_validate(item))
        except ValidationError as e:
            raise StructuralError(f"Event {index} is malformed: {e.error_count()} invalid field(s)") from e

    logger.info(f"Parsed event batch with {len(events)} events")
    return events
