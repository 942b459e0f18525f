"""Simulation core for StageSim.

This package contains the propellant and engine models and the tick
scheduler that drives them:
- compounds: Fuel / oxidizer compound data and the bundled catalog
- tank: Depletable propellant reservoirs
- clock: Temporal interface and the cooperative tick scheduler
- engine: Staged combustion engine state machine
- telemetry: Read-only recorder of engine and tank state
- config: Scenario definition and JSON persistence
- simulation: Scenario wiring and batch runs
"""
