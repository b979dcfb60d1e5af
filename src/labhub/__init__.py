"""lab-hub: instance label forging and client-side state synchronization."""
