import io

from oskit.barber import main, run_monitor_shop, run_semaphore_shop

CLOSING_LINE = "All customers processed. Shop closed."


def _assert_everyone_served(result, out):
    served, turned_away = result
    assert sorted(served) == [1, 2, 3, 4]
    assert turned_away == []
    assert out.getvalue().splitlines()[-1] == CLOSING_LINE


def _assert_everyone_turned_away(result, out):
    served, turned_away = result
    assert served == []
    assert sorted(turned_away) == [1, 2, 3]
    assert "[Customer 2] No chairs. Leaving." in out.getvalue().splitlines()


def _assert_accounted_for(result):
    served, turned_away = result
    assert sorted(served + turned_away) == list(range(1, 11))
    assert len(served) >= 1


def _assert_haircuts_reported(result, out):
    served, _ = result
    assert served
    lines = out.getvalue().splitlines()
    for cid in served:
        assert f"[Customer {cid}] Haircut done. Leaving." in lines


def test_monitor_everyone_served_when_enough_chairs():
    out = io.StringIO()
    _assert_everyone_served(run_monitor_shop(4, 4, 0, 0, out), out)


def test_semaphore_everyone_served_when_enough_chairs():
    out = io.StringIO()
    _assert_everyone_served(run_semaphore_shop(4, 4, 0, 0, out), out)


def test_monitor_no_chairs_turns_everyone_away():
    out = io.StringIO()
    _assert_everyone_turned_away(run_monitor_shop(3, 0, 0, 0, out), out)


def test_semaphore_no_chairs_turns_everyone_away():
    out = io.StringIO()
    _assert_everyone_turned_away(run_semaphore_shop(3, 0, 0, 0, out), out)


def test_monitor_every_customer_accounted_for():
    _assert_accounted_for(run_monitor_shop(10, 5, 0, 0, io.StringIO()))


def test_semaphore_every_customer_accounted_for():
    _assert_accounted_for(run_semaphore_shop(10, 5, 0, 0, io.StringIO()))


def test_monitor_served_customers_report_haircut():
    out = io.StringIO()
    _assert_haircuts_reported(run_monitor_shop(2, 2, 0, 0, out), out)


def test_semaphore_served_customers_report_haircut():
    out = io.StringIO()
    _assert_haircuts_reported(run_semaphore_shop(2, 2, 0, 0, out), out)


def test_main_semaphore(capsys):
    code = main(["--semaphore", "--customers", "2", "--chairs", "2",
                 "--haircut", "0", "--max-arrival", "0"])
    assert code == 0
    assert CLOSING_LINE in capsys.readouterr().out