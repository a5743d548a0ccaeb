from decimal import Decimal
from urllib.parse import parse_qsl, urlsplit

import pytest

from coincheck_client.coincheck import ENV_ACCESS_KEY, ENV_SECRET_KEY, Coincheck, CoincheckNoAuth
from coincheck_client.errors import DecodeError, MissingCredentialsError
from coincheck_client.types import BaseOrderType, CoinPair, Pagination, SortOrder

CREATED = "2015-01-10T05:55:38.000Z"


def _query(prepared):
    return dict(parse_qsl(urlsplit(prepared.url).query))


def _path(prepared):
    return urlsplit(prepared.url).path


@pytest.fixture
def coincheck(monkeypatch):
    cc = Coincheck("APIKEY", "SECRET")
    monkeypatch.setattr(cc.client, "_nonce", lambda: "1600000000000000")
    return cc


@pytest.fixture
def clean_env(monkeypatch):
    for name in (ENV_ACCESS_KEY, ENV_SECRET_KEY):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)


def test_public_trades(coincheck, fake_send, make_response):
    body = (
        '{"success":true,"pagination":{"limit":1,"order":"desc","starting_after":null,"ending_before":null},'
        '"data":[{"id":82,"amount":"0.28391","rate":"35400.0","pair":"btc_jpy","order_type":"sell",'
        f'"created_at":"{CREATED}"}}]}}'
    )
    sent = fake_send(coincheck.client.session, make_response(200, body))

    trades = coincheck.public.trades(CoinPair.BTC_JPY)

    prepared, _ = sent[0]
    assert _path(prepared) == "/api/trades"
    assert _query(prepared) == {"pair": "btc_jpy"}
    assert "ACCESS-KEY" not in prepared.headers
    assert trades.pagination.order is SortOrder.DESC
    assert trades.data[0].amount == Decimal("0.28391")
    assert trades.data[0].created_at.year == 2015


def test_public_order_book_rows(coincheck, fake_send, make_response):
    body = '{"asks":[["27330.0","2.25"],["27340.0","0.45"]],"bids":[["27240.0","1.1543"]]}'
    fake_send(coincheck.client.session, make_response(200, body))

    book = coincheck.public.order_book()

    assert book.asks[0].rate == Decimal("27330.0")
    assert book.asks[1].amount == Decimal("0.45")
    assert book.bids[0].amount == Decimal("1.1543")


def test_public_order_rate_from_amount(coincheck, fake_send, make_response):
    body = '{"success":true,"rate":"60000","price":"6000","amount":"0.1"}'
    sent = fake_send(coincheck.client.session, make_response(200, body))

    rate = coincheck.public.order_rate_from_amount(BaseOrderType.BUY, CoinPair.BTC_JPY, Decimal("0.1"))

    prepared, _ = sent[0]
    assert _path(prepared) == "/api/exchange/orders/rate"
    assert _query(prepared) == {"order_type": "buy", "pair": "btc_jpy", "amount": "0.1"}
    assert rate.price == Decimal("6000")


def test_public_marketplace_buy_rate(coincheck, fake_send, make_response):
    sent = fake_send(coincheck.client.session, make_response(200, '{"rate":"4043996.0"}'))

    rate = coincheck.public.marketplace_buy_rate(CoinPair.MONA_JPY)

    assert _path(sent[0][0]) == "/api/rate/mona_jpy"
    assert rate.rate == Decimal("4043996.0")


def test_order_limit_buy(coincheck, fake_send, make_response):
    body = (
        '{"success":true,"id":12345,"rate":"30010.0","amount":"1.3","order_type":"buy",'
        f'"stop_loss_rate":null,"pair":"btc_jpy","created_at":"{CREATED}"}}'
    )
    sent = fake_send(coincheck.client.session, make_response(200, body))

    out = coincheck.private.order.new_limit_buy(CoinPair.BTC_JPY, Decimal("30010.0"), Decimal("1.3"))

    prepared, _ = sent[0]
    assert prepared.method == "POST"
    assert _path(prepared) == "/api/exchange/orders"
    assert _query(prepared) == {"pair": "btc_jpy", "order_type": "buy", "rate": "30010.0", "amount": "1.3"}
    assert prepared.headers["ACCESS-KEY"] == "APIKEY"
    assert out.rate == Decimal("30010.0")
    assert out.stop_loss_rate is None


def test_order_stop_market_buy(coincheck, fake_send, make_response):
    body = f'{{"success":true,"id":9,"order_type":"market_buy","pair":"btc_jpy","created_at":"{CREATED}"}}'
    sent = fake_send(coincheck.client.session, make_response(200, body))

    out = coincheck.private.order.new_stop_market_buy(CoinPair.BTC_JPY, 10000, Decimal("5000000"))

    assert _query(sent[0][0]) == {
        "pair": "btc_jpy",
        "order_type": "market_buy",
        "market_buy_amount": "10000",
        "stop_loss_rate": "5000000",
    }
    assert out.amount is None


def test_order_rejects_float_amount(coincheck, fake_send):
    sent = fake_send(coincheck.client.session)

    with pytest.raises(TypeError):
        coincheck.private.order.new_market_sell(CoinPair.BTC_JPY, 0.1)

    assert sent == []


def test_order_cancel(coincheck, fake_send, make_response):
    sent = fake_send(coincheck.client.session, make_response(200, '{"success":true,"id":12345}'))

    out = coincheck.private.order.cancel(12345)

    prepared, _ = sent[0]
    assert prepared.method == "DELETE"
    assert _path(prepared) == "/api/exchange/orders/12345"
    assert prepared.headers["Content-Type"] == "application/json"
    assert out.id == 12345


def test_order_transactions_pagination(coincheck, fake_send, make_response):
    body = (
        '{"success":true,"pagination":{"limit":3,"order":"asc","starting_after":10,"ending_before":null},'
        f'"data":[{{"id":38,"order_id":49,"created_at":"{CREATED}","funds":{{"btc":"0.1","jpy":"-4096.135"}},'
        '"pair":"btc_jpy","rate":"40900.0","fee_currency":null,"fee":"6.135","liquidity":"T","side":"buy"}]}'
    )
    sent = fake_send(coincheck.client.session, make_response(200, body))

    page = coincheck.private.order.transactions_pagination(
        Pagination(limit=3, order=SortOrder.ASC, starting_after=10)
    )

    assert _query(sent[0][0]) == {"limit": "3", "order": "asc", "starting_after": "10"}
    assert page.pagination.starting_after == 10
    assert page.data[0].funds["jpy"] == Decimal("-4096.135")
    assert page.data[0].fee_currency is None


def test_account_balance_missing_field(coincheck, fake_send, make_response):
    fake_send(coincheck.client.session, make_response(200, '{"success":true,"jpy":"0.8401","btc":"7.75052654"}'))

    with pytest.raises(DecodeError) as exc_info:
        coincheck.private.account.balance()

    assert exc_info.value.shape == "Balance"


def test_account_sends_uses_btc(coincheck, fake_send, make_response):
    body = (
        '{"success":true,"sends":[{"id":2,"amount":"0.05","currency":"BTC","fee":"0.0",'
        f'"address":"1WiJHaDBWV6fP9r5k7mHZvLGE9zR3Ro2A","created_at":"{CREATED}"}}]}}'
    )
    sent = fake_send(coincheck.client.session, make_response(200, body))

    history = coincheck.private.account.sends()

    assert _path(sent[0][0]) == "/api/send_money"
    assert _query(sent[0][0]) == {"currency": "BTC"}
    assert history.sends[0].amount == Decimal("0.05")


def test_withdraws_create(coincheck, fake_send, make_response):
    body = (
        '{"success":true,"data":{"id":1043,"status":"pending","amount":"10000.0","currency":"JPY",'
        f'"created_at":"{CREATED}","bank_account_id":1234,"fee":"400.0","is_fast":false}}}}'
    )
    sent = fake_send(coincheck.client.session, make_response(200, body))

    out = coincheck.private.withdraws_jpy.create_withdraw(1234, Decimal("10000"))

    prepared, _ = sent[0]
    assert prepared.method == "POST"
    assert _path(prepared) == "/api/withdraws"
    assert _query(prepared) == {"bank_account_id": "1234", "amount": "10000", "currency": "JPY"}
    assert out.data.fee == Decimal("400.0")


def test_withdraws_delete_bank_account(coincheck, fake_send, make_response):
    sent = fake_send(coincheck.client.session, make_response(200, '{"success":true}'))

    out = coincheck.private.withdraws_jpy.delete_bank_account(25621)

    assert sent[0][0].method == "DELETE"
    assert _path(sent[0][0]) == "/api/bank_accounts/25621"
    assert out.success is True


def test_last_request_time_is_exposed(coincheck, fake_send, make_response):
    fake_send(coincheck.client.session, make_response(200, '{"rate":"1"}'))
    before = coincheck.last_request_time

    coincheck.public.marketplace_buy_rate(CoinPair.BTC_JPY)

    assert coincheck.last_request_time >= before


def test_without_keys_is_public_only():
    cc = Coincheck.without_keys()

    assert isinstance(cc, CoincheckNoAuth)
    assert not hasattr(cc, "private")
    assert not cc.client.has_credentials


def test_from_env(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_ACCESS_KEY, "ENVKEY")
    monkeypatch.setenv(ENV_SECRET_KEY, "ENVSECRET")

    with Coincheck.from_env(tmp_path / "absent.env") as cc:
        assert cc.client.has_credentials


def test_from_env_reads_dotenv_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(f"{ENV_ACCESS_KEY}=FILEKEY\n{ENV_SECRET_KEY}=FILESECRET\n")

    cc = Coincheck.from_env(env_file)

    assert cc.client.has_credentials


def test_from_env_requires_both_keys(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv(ENV_ACCESS_KEY, "ENVKEY")

    with pytest.raises(MissingCredentialsError):
        Coincheck.from_env(tmp_path / "absent.env")
