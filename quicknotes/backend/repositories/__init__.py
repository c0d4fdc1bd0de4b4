# Note store implementations
