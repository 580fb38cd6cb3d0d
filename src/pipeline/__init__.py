"""Write-path stages: prepare, execute, reconcile, notify, compose."""
