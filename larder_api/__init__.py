"""HTTP API for the Larder order settlement core."""
