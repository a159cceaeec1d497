"""Routing — compiled route table with typed path parameters."""

from warble.routing.route import Route, RouteMatch
from warble.routing.router import Router, compile_path

__all__ = ["Route", "RouteMatch", "Router", "compile_path"]
