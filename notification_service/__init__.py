"""Order notification consumers: multiplexed workers over the three order queues."""
