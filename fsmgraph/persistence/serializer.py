# fsmgraph/persistence/serializer.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""
Machine and session serialization.

graph_to_json normalizes a graph back into a definition: it is a canonical
form, not a byte-faithful echo of what was loaded. Key order, shorthand versus
object transitions, and the machine id are not preserved.

A session document bundles that definition with the simulation history, log
and step count:

    {"machine": {...}, "simulation": {"history": [...], "log": [...], "currentStep": n},
     "meta": {"createdAt": "<ISO-8601>", "version": "1.0.0"}}
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Union

from fsmgraph.core.errors import SessionImportError
from fsmgraph.core.graph import MachineGraph
from fsmgraph.core.types import StateID
from fsmgraph.runtime.simulation import SimulationEngine

logger = logging.getLogger(__name__)

SESSION_VERSION = "1.0.0"


class ImportedSession(NamedTuple):
    machine: Dict[str, Any]
    history: List[StateID]


def graph_to_json(graph: MachineGraph) -> Dict[str, Any]:
    """
    Convert a graph into a clean, JSON-ready machine definition.

    Transitions without guard and actions use the bare-string shorthand, all
    others the object form. Applying parse -> serialize to the result yields it
    unchanged.
    """
    states: Dict[str, Any] = {}
    for state_id, node in graph.nodes.items():
        state_def: Dict[str, Any] = {"type": node.kind.value, "meta": node.meta_dict()}

        if node.transitions:
            on: Dict[str, Any] = {}
            for event, t in node.transitions.items():
                if t.is_shorthand:
                    on[event] = t.target
                else:
                    config: Dict[str, Any] = {"target": t.target}
                    if t.cond is not None:
                        config["cond"] = t.cond
                    config["actions"] = list(t.actions)
                    on[event] = config
            state_def["on"] = on

        states[state_id] = state_def

    return {"initial": graph.initial, "states": states}


def export_session(graph: MachineGraph, engine: SimulationEngine, now: Optional[datetime] = None) -> str:
    """
    Serialize a full session snapshot.

    :param graph: Machine to persist.
    :param engine: Simulation whose history, log and step count are captured.
    :param now: Timestamp to record; defaults to the current UTC time.
    :return: The session document as indented JSON text.
    """
    snapshot = engine.get_state()
    created_at = (now or datetime.now(timezone.utc)).isoformat()
    session = {
        "machine": graph_to_json(graph),
        "simulation": {
            "history": list(snapshot.history),
            "log": list(snapshot.log),
            "currentStep": snapshot.steps,
        },
        "meta": {"createdAt": created_at, "version": SESSION_VERSION},
    }
    logger.debug("Exported session for '%s' at step %d", graph.id, snapshot.steps)
    return json.dumps(session, indent=2)


def import_session(document: Union[str, bytes]) -> ImportedSession:
    """
    Parse a session document.

    The embedded definition is returned as-is and is not re-validated: run it
    through the parser before trusting it.

    :param document: Session JSON text.
    :return: The machine definition and the recorded history (empty without a simulation block).
    :raises SessionImportError: If the text is not JSON, nests too deeply, or lacks ``machine.states``.
    """
    try:
        session = json.loads(document)
        if not isinstance(session, Mapping):
            raise ValueError("Invalid session format: Document must be an object.")

        machine = session.get("machine")
        if not isinstance(machine, Mapping) or not machine.get("states"):
            raise ValueError("Invalid session format: Missing machine definition.")

        simulation = session.get("simulation")
        history: List[StateID] = []
        if simulation is not None:
            if not isinstance(simulation, Mapping) or not isinstance(simulation.get("history", []), list):
                raise ValueError("Invalid session format: Malformed simulation block.")
            history = list(simulation.get("history", []))
    except (ValueError, TypeError, RecursionError) as e:
        raise SessionImportError(f"Failed to import session: {e}") from e

    return ImportedSession(machine=dict(machine), history=history)
