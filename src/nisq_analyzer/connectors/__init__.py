# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
SDK connector extension API.

Connectors integrate quantum SDKs: they compile implementations to
measure circuit size and execute them on QPUs. Third-party packages
register connectors under the ``nisq_analyzer.connectors`` entry point
group.

Creating a Connector
--------------------
>>> from nisq_analyzer.connectors import SdkConnectorProtocol
>>> class MyConnector:
...     name = "my-sdk"
...     def supported_sdks(self): return ["MySdk"]
...     def supported_providers(self): return []
...     def sdk_specific_parameters(self): return set()
...     def analyze(self, file_location, qpu, parameters): ...
...     def execute(self, file_location, qpu, parameters, execution_result,
...                 store, *, cancel_token): ...

Register in pyproject.toml::

    [project.entry-points."nisq_analyzer.connectors"]
    my-sdk = "my_package.connector:MyConnector"
"""

from __future__ import annotations

from nisq_analyzer.connectors.registry import (
    CONNECTOR_ENTRY_POINT_GROUP,
    CancellationToken,
    ConnectorLoadError,
    ConnectorRegistry,
    SdkConnectorProtocol,
)


__all__ = [
    "CONNECTOR_ENTRY_POINT_GROUP",
    "CancellationToken",
    "ConnectorLoadError",
    "ConnectorRegistry",
    "SdkConnectorProtocol",
]
