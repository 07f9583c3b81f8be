from gateway.utils.message_helpers import dig, dig_str, split_system_messages

__all__ = ["dig", "dig_str", "split_system_messages"]
