"""
Co-Driver Trip Board - Example Usage
Shows different ways to use the filtering engine and the board
"""

from datetime import date, datetime, timedelta

from codriver_trips import (
    BoardConfig,
    CoDriverBoard,
    DateSelector,
    SortMode,
    TimeSlot,
    Trip,
    build_filter_config,
    filter_and_sort,
    print_board_summary,
    upcoming_trips,
)


def sample_trips(today: date):
    tomorrow = today + timedelta(days=1)
    return [
        Trip("t1", "Pune", "Mumbai", today - timedelta(days=1), "9:00 AM"),
        Trip("t2", "Pune", "Mumbai", today, "11:59 PM"),
        Trip("t3", "Pune", "Mumbai", tomorrow, "3:00 PM"),
        Trip("t4", "Pune", "Mumbai", tomorrow, "9:00 AM"),
        Trip("t5", "Nashik", "Pune", tomorrow, "21:00"),
    ]


def example_engine_only():
    """Run the engine directly on in-memory trips"""
    print("=" * 60)
    print("Example 1: Filtering and sorting in memory")
    print("=" * 60)

    now = datetime.now()
    trips = upcoming_trips(sample_trips(now.date()), now)

    config = build_filter_config(
        now.date(),
        DateSelector.tomorrow(),
        from_text="pune",
        sort_mode=SortMode.EARLIEST_DEPARTURE,
    )
    print_board_summary(filter_and_sort(trips, config))


def example_time_slots():
    """Only afternoon departures"""
    print("\n" + "=" * 60)
    print("Example 2: Afternoon trips tomorrow")
    print("=" * 60)

    now = datetime.now()
    config = build_filter_config(
        now.date(),
        DateSelector.tomorrow(),
        time_slots=[TimeSlot.AFTERNOON],
    )
    print_board_summary(filter_and_sort(upcoming_trips(sample_trips(now.date()), now), config))


def example_live_board():
    """Load the board from the trip API configured in .env"""
    print("\n" + "=" * 60)
    print("Example 3: Live board")
    print("=" * 60)

    config = BoardConfig.from_env()
    if not config.api_base_url:
        print("\n⚠️  Set CODRIVER_API_URL to run this example")
        return

    board = CoDriverBoard(config, user_id="demo-user")
    board.check_status()
    if not board.is_approved:
        print(f"\n⏳ Driver approval is {board.driver_status.approval_status.value}")
        return

    if board.fetch_data():
        board.select_date(DateSelector.tomorrow())
        board.open_filters()
        board.set_sort(SortMode.LATEST_DEPARTURE)
        board.apply_filters()
        print_board_summary(board.visible_trips(), board.requests_map, board.date_label())
    else:
        print("\n❌ Could not load trips")


if __name__ == "__main__":
    example_engine_only()
    example_time_slots()
    example_live_board()
