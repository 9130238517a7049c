# Layout, viewport and transition services; import the submodules directly.
