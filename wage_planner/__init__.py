from wage_planner.config.loaders import load_planner_config
from wage_planner.data.readers import read_roster
from wage_planner.session.controller import StagingController
from wage_planner.session.registry import SessionRegistry

__all__ = ['load_planner_config', 'read_roster', 'StagingController', 'SessionRegistry']
