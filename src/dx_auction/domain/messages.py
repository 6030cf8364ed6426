"""User-facing texts produced by the auction sweep."""

from src.dx_common.money import kopecks_to_display


def no_bids_title() -> str:
    return "Auction ended with no bids"


def no_bids_message(item_title: str, start_price: int) -> str:
    return (
        f'Your auction for "{item_title}" ended with no bids. It has been converted '
        f"to a regular listing at {kopecks_to_display(start_price)}."
    )


def winner_title() -> str:
    return "Congratulations! You won the auction!"


def winner_message(item_title: str, amount: int) -> str:
    return (
        f'You won the auction for "{item_title}" with a bid of '
        f"{kopecks_to_display(amount)}. Contact the seller to arrange the meetup."
    )


def seller_sold_title() -> str:
    return "Your auction has ended!"


def seller_sold_message(item_title: str, winner_name: str, amount: int) -> str:
    return (
        f'Your auction for "{item_title}" has ended. {winner_name} won with a bid of '
        f"{kopecks_to_display(amount)}. They will contact you to arrange the meetup."
    )


def starter_message(item_title: str, amount: int) -> str:
    return (
        f'Hi! I won your auction for "{item_title}" with a bid of '
        f"{kopecks_to_display(amount)}. When can we meet to complete the transaction?"
    )
