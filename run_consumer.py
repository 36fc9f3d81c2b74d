#!/usr/bin/env python
"""
Script to run the RabbitMQ notification consumer
"""
from marketplace.consumers.order_consumer import start_consumer

if __name__ == "__main__":
    start_consumer()
