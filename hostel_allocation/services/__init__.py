"""Business services; each returns ServiceResult and owns its transactions."""
