"""Source-control host connectors."""

from typing import Any

from updatepilot.models.connector import ConnectorRecord, ConnectorType

from .base import Connector
from .github import GithubConnector
from .gitlab import GitlabConnector

CONNECTOR_TYPES: dict[ConnectorType, type[Connector]] = {
    ConnectorType.GITHUB: GithubConnector,
    ConnectorType.GITLAB: GitlabConnector,
}


def create_connector(record: ConnectorRecord | dict[str, Any], **kwargs: Any) -> Connector:
    """
    Build the connector variant named by the record's ``type``.

    Args:
        record: Persisted connector (validated model or raw dict)
        **kwargs: Passed to the connector constructor (client, hosts, clock)

    Returns:
        Connector instance

    Raises:
        pydantic.ValidationError: If a raw dict is malformed or names an unknown type
    """
    if not isinstance(record, ConnectorRecord):
        record = ConnectorRecord.model_validate(record)
    return CONNECTOR_TYPES[record.type].from_record(record, **kwargs)


__all__ = ["CONNECTOR_TYPES", "Connector", "GithubConnector", "GitlabConnector", "create_connector"]
