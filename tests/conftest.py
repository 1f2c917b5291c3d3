from hypothesis import HealthCheck, settings

# Input-generation speed depends on the host; don't fail tests on timing alone.
settings.register_profile("default", suppress_health_check=[HealthCheck.too_slow])
settings.load_profile("default")
