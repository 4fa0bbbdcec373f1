"""Order producer: order source, fan-out publisher and dispatch loop."""
