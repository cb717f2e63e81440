"""
InventoryAgent — Read-only inventory report. Items only change through
the consequence applicator.
"""

from typing import Any, Dict, Mapping

from agents.base import BaseAgent
from models.game_config import AgentRole
from models.game_state import GameState


class InventoryAgent(BaseAgent):
    role = AgentRole.INVENTORY

    async def execute(self, state: GameState, results: Mapping[str, Any]) -> Dict[str, Any]:
        inventory = state.inventory
        return {
            "item_count": len(inventory.items),
            "available_space": inventory.available_space,
            "inventory_full": inventory.available_space == 0,
            "gold": inventory.gold,
            "items": [{"name": i.name, "category": i.category, "quantity": i.quantity} for i in inventory.items],
        }
