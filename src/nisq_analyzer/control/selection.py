# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: 2026 nisq-analyzer

"""
Implementation and QPU selection.

Selection runs in three stages for an algorithm and a set of raw input
parameters:

1. **Candidate filter** - keep implementations whose required parameters
   are all supplied and whose selection rule accepts them.
2. **Estimation and shortlist** - estimate circuit width and depth from
   the width/depth rules and ask the rule oracle for QPUs that can host
   circuits of that size.
3. **Refinement** - compile each implementation for every shortlisted
   QPU through its SDK connector and check the measured circuit against
   the QPU's qubit count and coherence-bounded depth. Without a connector,
   or when the compiler yields nothing, fall back to the estimates.

Expected infeasibility never raises: the result list just gets shorter.
A failure while processing one implementation is logged and only that
implementation is dropped.

Examples
--------
>>> selector = Selector(catalog, oracle, registry)
>>> for result in selector.perform_selection("shor", {"N": "15"}):
...     print(result.implementation.name, result.qpu.name, result.estimate)
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from nisq_analyzer.connectors.registry import ConnectorRegistry, SdkConnectorProtocol
from nisq_analyzer.models import (
    AnalysisResult,
    Implementation,
    Parameter,
    ParameterValue,
    Qpu,
    infer_typed_parameter_values,
)
from nisq_analyzer.rules import RuleOracleProtocol
from nisq_analyzer.storage.types import CatalogProtocol


logger = logging.getLogger(__name__)


# =============================================================================
# Candidate filter
# =============================================================================


def required_parameters(
    implementation: Implementation,
    oracle: RuleOracleProtocol,
) -> set[Parameter]:
    """
    Get all parameters an implementation needs for selection.

    The union of the declared input parameters and the parameters
    referenced by the selection, width and depth rules. Names are unique:
    a declared parameter takes precedence over a rule reference of the
    same name.

    Parameters
    ----------
    implementation : Implementation
        Implementation to inspect.
    oracle : RuleOracleProtocol
        Oracle used for static rule analysis.

    Returns
    -------
    set of Parameter
        Required parameters.
    """
    by_name: dict[str, Parameter] = {p.name: p for p in implementation.input_parameters}

    referenced: list[Parameter] = []
    referenced.extend(oracle.referenced_parameters(implementation.selection_rule))
    referenced.extend(
        oracle.referenced_parameters(implementation.width_rule, numeric=True)
    )
    referenced.extend(
        oracle.referenced_parameters(implementation.depth_rule, numeric=True)
    )
    for param in sorted(referenced, key=lambda p: (p.name, p.type.value)):
        by_name.setdefault(param.name, param)

    return set(by_name.values())


def parameters_available(
    required: Iterable[Parameter],
    supplied_names: Iterable[str],
) -> bool:
    """Check that every required parameter name was supplied."""
    names = set(supplied_names)
    return all(param.name in names for param in required)


def filter_candidates(
    implementations: Iterable[Implementation],
    raw_params: Mapping[str, str],
    oracle: RuleOracleProtocol,
) -> list[Implementation]:
    """
    Keep implementations that can handle the supplied parameters.

    Parameters
    ----------
    implementations : iterable of Implementation
        Candidates, in catalog order.
    raw_params : mapping of str to str
        Raw input parameters.
    oracle : RuleOracleProtocol
        Rule oracle evaluating selection rules.

    Returns
    -------
    list of Implementation
        Surviving implementations, order preserved.
    """
    survivors: list[Implementation] = []

    for impl in implementations:
        try:
            required = required_parameters(impl, oracle)
            if not parameters_available(required, raw_params):
                missing = sorted(p.name for p in required if p.name not in raw_params)
                logger.debug(
                    "Implementation %s lacks parameters %s, skipping",
                    impl.name,
                    ", ".join(missing),
                )
                continue

            if impl.selection_rule and not oracle.is_feasible(
                impl.selection_rule, raw_params
            ):
                logger.debug("Selection rule of %s rejects the input", impl.name)
                continue

        except Exception as e:
            logger.warning(
                "Excluding implementation %s: rule evaluation failed: %s",
                impl.name,
                e,
                exc_info=True,
            )
            continue

        survivors.append(impl)

    return survivors


# =============================================================================
# Estimation and shortlist
# =============================================================================


def estimate_resources(
    implementation: Implementation,
    raw_params: Mapping[str, str],
    oracle: RuleOracleProtocol,
) -> tuple[int, int]:
    """
    Estimate circuit width and depth from the implementation's rules.

    Returns
    -------
    tuple of int
        ``(width, depth)``; 0 means no estimate is available.
    """
    width = (
        oracle.estimate(implementation.width_rule, raw_params)
        if implementation.width_rule
        else 0
    )
    depth = (
        oracle.estimate(implementation.depth_rule, raw_params)
        if implementation.depth_rule
        else 0
    )
    return width, depth


def resolve_qpus(qpu_ids: Iterable[str], catalog: CatalogProtocol) -> list[Qpu]:
    """Resolve QPU ids, dropping unknown and repeated ids."""
    seen: set[str] = set()
    qpus: list[Qpu] = []
    for qpu_id in qpu_ids:
        if qpu_id in seen:
            continue
        seen.add(qpu_id)
        qpu = catalog.find_qpu(qpu_id)
        if qpu is None:
            logger.debug("Ignoring unknown QPU id %s", qpu_id)
            continue
        qpus.append(qpu)
    return qpus


# =============================================================================
# Refinement
# =============================================================================


def fits_qpu(qpu: Qpu, width: int, depth: int) -> bool:
    """
    Apply the physical capacity gates of a QPU.

    The width must not exceed the qubit count and the depth must not
    exceed ``floor(t1 / max_gate_time)``. A QPU without a known gate time
    imposes no depth limit.
    """
    if width > qpu.qubit_count:
        logger.debug(
            "Required qubit number (%d) is greater than provided number (%d) on %s",
            width,
            qpu.qubit_count,
            qpu.name,
        )
        return False

    max_depth = qpu.max_circuit_depth
    if max_depth is not None and depth > max_depth:
        logger.debug(
            "Required circuit depth (%d) is greater than maximum circuit depth (%d) on %s",
            depth,
            max_depth,
            qpu.name,
        )
        return False

    return True


class Selector:
    """
    Runs the selection pipeline against a catalog.

    Parameters
    ----------
    catalog : CatalogProtocol
        Read-only source of implementations and QPUs.
    oracle : RuleOracleProtocol
        Rule oracle.
    registry : ConnectorRegistry
        SDK connectors used for exact circuit analysis.
    """

    def __init__(
        self,
        catalog: CatalogProtocol,
        oracle: RuleOracleProtocol,
        registry: ConnectorRegistry,
    ) -> None:
        self.catalog = catalog
        self.oracle = oracle
        self.registry = registry

    def perform_selection(
        self,
        algorithm_id: str,
        raw_params: Mapping[str, str],
    ) -> list[AnalysisResult]:
        """
        Select suitable (implementation, QPU) pairs for an algorithm.

        Parameters
        ----------
        algorithm_id : str
            Algorithm to select an implementation for.
        raw_params : mapping of str to str
            Raw input parameters.

        Returns
        -------
        list of AnalysisResult
            Accepted pairs in implementation-then-QPU order. Possibly empty.
        """
        logger.debug(
            "Performing implementation and QPU selection for algorithm %s",
            algorithm_id,
        )

        implementations = self.catalog.find_implementations(algorithm_id)
        logger.debug("Found %d implementations for the algorithm", len(implementations))

        candidates = filter_candidates(implementations, raw_params, self.oracle)
        logger.debug(
            "%d implementations are executable for the given input parameters",
            len(candidates),
        )

        results: list[AnalysisResult] = []
        for impl in candidates:
            try:
                results.extend(self.analyze_implementation(impl, raw_params))
            except Exception as e:
                logger.warning(
                    "Skipping implementation %s: analysis failed: %s",
                    impl.name,
                    e,
                    exc_info=True,
                )

        logger.info(
            "Selection for algorithm %s produced %d result(s)",
            algorithm_id,
            len(results),
        )
        return results

    def analyze_implementation(
        self,
        implementation: Implementation,
        raw_params: Mapping[str, str],
    ) -> list[AnalysisResult]:
        """
        Find suitable QPUs for one implementation that passed the filter.

        Returns
        -------
        list of AnalysisResult
            Accepted QPUs for this implementation.
        """
        logger.debug(
            "Searching for suitable QPUs for implementation %s (sdk %s)",
            implementation.name,
            implementation.sdk,
        )

        width, depth = estimate_resources(implementation, raw_params, self.oracle)

        qpu_ids = self.oracle.shortlist(implementation, width, depth)
        if not qpu_ids:
            logger.debug(
                "Rule oracle returns no suited QPUs, skipping implementation %s",
                implementation.name,
            )
            return []

        qpus = resolve_qpus(qpu_ids, self.catalog)
        logger.debug("Filtering based on estimates returned %d QPU candidate(s)", len(qpus))

        connector = self.registry.find(implementation.sdk)
        has_estimates = width != 0 and depth != 0

        if connector is None:
            if has_estimates:
                logger.warning(
                    "No connector for sdk %s, using estimates for implementation %s",
                    implementation.sdk,
                    implementation.name,
                )
                return [
                    AnalysisResult(qpu, implementation, True, depth, width) for qpu in qpus
                ]
            logger.warning(
                "No connector for sdk %s and no complete estimate for implementation "
                "%s, skipping it",
                implementation.sdk,
                implementation.name,
            )
            return []

        typed_params = infer_typed_parameter_values(
            required_parameters(implementation, self.oracle), raw_params
        )

        results: list[AnalysisResult] = []
        for qpu in qpus:
            result = self._refine(
                implementation, qpu, connector, typed_params, width, depth
            )
            if result is not None:
                results.append(result)
        return results

    def _refine(
        self,
        implementation: Implementation,
        qpu: Qpu,
        connector: SdkConnectorProtocol,
        typed_params: Mapping[str, ParameterValue],
        width: int,
        depth: int,
    ) -> AnalysisResult | None:
        logger.debug(
            "Checking if QPU %s is suitable for implementation %s",
            qpu.name,
            implementation.name,
        )

        try:
            info = connector.analyze(implementation.file_location, qpu, typed_params)
        except Exception as e:
            logger.error(
                "Connector %s raised during analysis of %s on %s: %s",
                connector.name,
                implementation.name,
                qpu.name,
                e,
                exc_info=True,
            )
            info = None

        if info is None:
            if width != 0 and depth != 0:
                logger.warning(
                    "Circuit analysis by compiler failed, using estimates for %s on %s",
                    implementation.name,
                    qpu.name,
                )
                return AnalysisResult(qpu, implementation, True, depth, width)
            logger.warning(
                "Circuit analysis by compiler failed and no estimates exist for %s on "
                "%s, skipping QPU",
                implementation.name,
                qpu.name,
            )
            return None

        if not info.success:
            logger.debug(
                "Transpilation of %s for %s impossible: %s. Skipping QPU.",
                implementation.name,
                qpu.name,
                info.error,
            )
            return None

        if not fits_qpu(qpu, info.circuit_width, info.circuit_depth):
            return None

        return AnalysisResult(
            qpu, implementation, False, info.circuit_depth, info.circuit_width
        )
