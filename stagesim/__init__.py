"""StageSim — staged combustion engine and propellant tank simulation."""

__app_name__ = "stagesim"
__version__ = "0.1.0"
