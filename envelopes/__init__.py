"""Household envelope planner: accounts, savings goals and the allocations between them."""
