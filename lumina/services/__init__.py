# Service layer for the Lumina desktop shell
# - host_context:  executable path and packaging-provided resource directory
# - path_resolver: locate the service bundle (server/ and scripts/)
# - diagnostics:   layout listings and runtime availability probes
# - supervisor:    start/stop/status of the backend service processes
# - startup:       start services once the UI signals readiness
