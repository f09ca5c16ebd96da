"""Register the fixtures shared by all test modules."""

from hypothesis import HealthCheck, settings

pytest_plugins = ["tests.fixtures.pddl_fixtures"]

# The first from_regex draw builds Hypothesis' Unicode charmap cache, which can
# exceed the input-generation time limit on a cold run.
settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")
