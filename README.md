# tinymqtt

A small, blocking MQTT v3.1.1 client. It encodes and decodes the packets a
client sends and receives, drives the connect, publish, subscribe,
unsubscribe, ping and disconnect exchanges, and answers QoS 1 and QoS 2
acknowledgements. The network layer is pluggable: the client talks to any
object that offers `connect`, `read`, `write` and `disconnect`, so the same
client runs over plain TCP or over an in-memory fake in tests.

## Installing

```
pip install tinymqtt
```

For running the test suite:

```
pip install "tinymqtt[test]"
pytest
```

## Layout

| Module                | What it holds |
|-----------------------|---------------|
| `tinymqtt.errors`     | `ResponseCode`, the `MqttError` hierarchy, `return_code_to_string`, `error_for_code` |
| `tinymqtt.protocol`   | Enums (`QoS`, `PacketType`, `PacketFlag`, `ConnectFlag`, `ConnectAckReturnCode`, `SubscribeAckReturnCode`) and message types (`Message`, `Topic`, `Connect`, `ConnectAck`, `PublishResponse`, `Subscribe`, `SubscribeAck`, `UnsubscribeAck`) |
| `tinymqtt.codec`      | Wire elements: remaining length, 16-bit numbers, strings, binary data, fixed header |
| `tinymqtt.packets`    | Encoders and decoders for each control packet |
| `tinymqtt.transport`  | `Network` (plain TCP), `Transport`, `read_packet`, `write_packet` |
| `tinymqtt.dispatch`   | `wait_for_packet`, the receive loop that answers acknowledgements |
| `tinymqtt.client`     | `MqttClient`, the high-level API |

## The network

`tinymqtt.transport.Network` is a ready-made TCP connection built on the
standard `socket` module. Any object with the same four methods can take its
place:

- `connect(host, number, timeout_ms)` opens the link;
- `read(length, timeout_ms)` returns up to `length` bytes, or `b""` when
  nothing arrived in time;
- `write(data, timeout_ms)` returns the number of bytes accepted, or `0` when
  the write timed out;
- `disconnect()` closes the link.

Failures are reported by raising `OSError`; `Transport` turns them into
`NetworkError`, and an empty read into `MqttTimeoutError`. A timeout of zero
or less waits without limit.

```python
from tinymqtt.client import MqttClient
from tinymqtt.protocol import Connect, Message, QoS, Subscribe, Topic
from tinymqtt.transport import Network


def on_message(client, message, msg_new, msg_done):
    if msg_new:
        print("topic:", message.topic_name)
    print("chunk:", message.buffer)


client = MqttClient(Network(), on_message=on_message)
client.net_connect("broker.example.com")
ack = client.connect(Connect(client_id="demo", keep_alive_sec=60, clean_session=True))
client.subscribe(Subscribe(packet_id=1, topics=[Topic("sensors/#", QoS.AT_LEAST_ONCE)]))
client.publish(Message(topic_name="sensors/temp", buffer=b"21.5", qos=QoS.AT_LEAST_ONCE, packet_id=2))
client.wait_message(5000)
client.disconnect()
client.net_disconnect()
```

## Using the client

`MqttClient(network, on_message=None, tx_buf_len=1024, rx_buf_len=1024,
cmd_timeout_ms=1000)` wraps a network in a `Transport`. Buffer lengths must be
positive.

- `net_connect(host, ...)` opens the link and returns the number it connected
  to; passing `0` (the default) selects 1883, or 8883 when `use_tls` is set.
- `connect(connect)` sends CONNECT and waits for CONNACK; the `ConnectAck` is
  returned and also stored in `connect.ack`.
- `publish(publish)` sends a `Message`. A payload larger than the transmit
  buffer is sent in further pieces after the first packet. At QoS 1 it waits
  for PUBACK, at QoS 2 for PUBCOMP (the PUBREC is answered with PUBREL), and
  returns the `PublishResponse`; at QoS 0 it returns `None`. A QoS above 0
  with a packet id of 0 raises `PacketIdError`.
- `subscribe(subscribe)` sends SUBSCRIBE, waits for the SUBACK with the same
  packet id, stores each topic's return code in its `Topic` and returns the
  `SubscribeAck`.
- `unsubscribe(unsubscribe)` sends UNSUBSCRIBE and returns the
  `UnsubscribeAck`.
- `ping()` sends PINGREQ, waits for PINGRESP and returns its length.
- `wait_message(timeout_ms)` handles the next incoming packet and returns
  its decoded contents.
- `disconnect()` sends DISCONNECT; `net_disconnect()` closes the link.

Incoming PUBLISH payloads go to `on_message(client, message, msg_new,
msg_done)`. When a payload is larger than the receive buffer the callback is
called once per chunk: `msg_new` is true for the first chunk only, which is
also the only one carrying `topic_name`, and `msg_done` is true for the last.
`message.buffer_pos` gives the chunk's offset within `message.total_len`.
The callback returns `None` or `0` to carry on; any other response code is
raised as the matching exception. QoS 1 and 2 publishes are acknowledged
automatically with PUBACK or PUBREC.

## Errors

Failures raise a subclass of `MqttError`: `BadArgumentError`,
`OutOfBufferError`, `MalformedDataError`, `PacketTypeError`, `PacketIdError`,
`TlsConnectError`, `MqttTimeoutError` or `NetworkError`, each carrying its
`ResponseCode` in `code`. `return_code_to_string(code)` gives readable text
(`"Unknown"` for codes it does not know), and `error_for_code(code)` builds
the exception for a non-success code.

## Working with packets directly

`tinymqtt.packets` works without the client, for example to build test
fixtures:

```python
from tinymqtt.packets import decode_ping, encode_ping

frame = encode_ping(16)   # b"\xc0\x00"
```

Every encoder takes the transmit buffer length first and raises
`OutOfBufferError` when the packet does not fit (PUBLISH instead truncates its
payload to what fits). The remaining length uses seven data bits per byte
with a continuation bit, up to four bytes.

## What it does not do

- No TLS: `use_tls` only changes the default number chosen by `net_connect`,
  and `tls_callback` is never called. Supply a network object that wraps an
  encrypted socket if you need one.
- No background loop, reconnection, keep-alive timer or message store; every
  call blocks until its exchange completes, and pings are sent only when you
  call `ping()`.
- No command-line tool and no broker.