# Host-side adapters for running NextBasic programs.
