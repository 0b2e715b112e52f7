import math

import numpy as np
import pytest

from backpropviz.core.activations import sigmoid, sigmoid_derivative
from backpropviz.core.errors import ConfigurationError, InputShapeError
from backpropviz.core.network import BIAS_RANGE, FeedforwardNetwork, xavier_limit


def _snapshot(network):
    return (
        [w.copy() for w in network.get_weights()],
        [b.copy() for b in network.get_biases()],
        [a.copy() for a in network.get_activations()],
    )


def _assert_unchanged(network, snapshot):
    weights, biases, activations = snapshot
    for before, after in zip(weights, network.get_weights()):
        assert np.array_equal(before, after)
    for before, after in zip(biases, network.get_biases()):
        assert np.array_equal(before, after)
    for before, after in zip(activations, network.get_activations()):
        assert np.array_equal(before, after)


@pytest.mark.parametrize("sizes", [[2, 1], [2, 4, 1], [25, 8, 4], [3, 5, 4, 2]])
def test_parameter_shapes_follow_layer_sizes(sizes):
    network = FeedforwardNetwork(sizes, seed=0)
    assert network.get_layer_sizes() == tuple(sizes)
    assert len(network.get_weights()) == len(sizes) - 1
    for idx, (W, b) in enumerate(zip(network.get_weights(), network.get_biases())):
        assert W.shape == (sizes[idx], sizes[idx + 1])
        assert b.shape == (sizes[idx + 1],)
    assert [a.shape[0] for a in network.get_activations()] == sizes
    assert [g.shape[0] for g in network.get_gradients()] == sizes[1:]


def test_initialisation_respects_xavier_and_bias_bounds():
    network = FeedforwardNetwork([25, 8, 4], seed=3)
    for W, b in zip(network.get_weights(), network.get_biases()):
        limit = xavier_limit(*W.shape)
        assert np.all(np.abs(W) <= limit)
        assert np.all(np.abs(b) <= BIAS_RANGE)
    assert xavier_limit(2, 4) == pytest.approx(1.0)
    assert network.learning_rate == 0.5
    assert network.epoch == 0
    assert network.last_error == 0.0


@pytest.mark.parametrize(
    "sizes",
    [[], [3], [2, 0, 1], [2, -1, 1], [2, 1.5, 1], [2, "4", 1], [True, 1]],
)
def test_invalid_layer_sizes_are_rejected(sizes):
    with pytest.raises(ConfigurationError):
        FeedforwardNetwork(sizes)


def test_configuration_error_is_a_value_error():
    with pytest.raises(ValueError):
        FeedforwardNetwork([4])


def test_same_seed_gives_same_parameters():
    first = FeedforwardNetwork([2, 4, 1], seed=42)
    second = FeedforwardNetwork([2, 4, 1], seed=42)
    for a, b in zip(first.get_weights(), second.get_weights()):
        assert np.array_equal(a, b)
    for a, b in zip(first.get_biases(), second.get_biases()):
        assert np.array_equal(a, b)


def test_hidden_and_output_activations_stay_inside_unit_interval():
    rng = np.random.default_rng(0)
    network = FeedforwardNetwork([25, 8, 4], seed=1)
    for _ in range(50):
        network.forward(rng.uniform(0.0, 1.0, size=25))
        for activation in network.get_activations()[1:]:
            assert np.all(activation > 0.0)
            assert np.all(activation < 1.0)


def test_forward_is_deterministic_for_fixed_weights():
    network = FeedforwardNetwork([3, 5, 2], seed=9)
    first = network.forward([0.2, -0.4, 0.9]).copy()
    second = network.forward([0.2, -0.4, 0.9]).copy()
    assert np.array_equal(first, second)


def test_forward_returns_live_output_buffer_and_copies_inputs():
    network = FeedforwardNetwork([2, 3, 2], seed=0)
    inputs = [1.0, 0.0]
    output = network.forward(inputs)
    assert output is network.get_activations()[-1]
    inputs[0] = 5.0
    assert network.get_activations()[0].tolist() == [1.0, 0.0]


def test_forward_matches_hand_computation():
    network = FeedforwardNetwork([2, 2, 1], seed=0)
    network.weights[0][...] = [[0.1, -0.2], [0.3, 0.4]]
    network.biases[0][...] = [0.05, -0.05]
    network.weights[1][...] = [[0.5], [-0.6]]
    network.biases[1][...] = [0.1]

    x = [1.0, 0.5]
    h0 = 1 / (1 + math.exp(-(0.05 + 1.0 * 0.1 + 0.5 * 0.3)))
    h1 = 1 / (1 + math.exp(-(-0.05 + 1.0 * -0.2 + 0.5 * 0.4)))
    out = 1 / (1 + math.exp(-(0.1 + h0 * 0.5 + h1 * -0.6)))

    result = network.forward(x)
    assert result[0] == pytest.approx(out, rel=1e-12)
    assert network.get_activations()[1].tolist() == pytest.approx([h0, h1], rel=1e-12)


def test_backward_applies_the_delta_rule():
    network = FeedforwardNetwork([2, 2, 1], learning_rate=0.5, seed=0)
    network.weights[0][...] = [[0.1, -0.2], [0.3, 0.4]]
    network.biases[0][...] = [0.05, -0.05]
    network.weights[1][...] = [[0.5], [-0.6]]
    network.biases[1][...] = [0.1]
    W0, W1 = network.weights[0].copy(), network.weights[1].copy()
    b0, b1 = network.biases[0].copy(), network.biases[1].copy()

    x = np.array([1.0, 0.5])
    t = np.array([1.0])
    network.forward(x)
    h = network.get_activations()[1].copy()
    out = network.get_activations()[2].copy()

    g_out = (t - out) * out * (1 - out)
    g_hidden = np.array(
        [sum(g_out[k] * W1[j, k] for k in range(1)) * h[j] * (1 - h[j]) for j in range(2)]
    )

    network.backward(t)

    assert network.get_gradients()[1] == pytest.approx(g_out)
    assert network.get_gradients()[0] == pytest.approx(g_hidden)
    for i in range(2):
        for j in range(2):
            assert network.weights[0][i, j] == pytest.approx(W0[i, j] + 0.5 * g_hidden[j] * x[i])
        assert network.weights[1][i, 0] == pytest.approx(W1[i, 0] + 0.5 * g_out[0] * h[i])
    assert network.biases[0] == pytest.approx(b0 + 0.5 * g_hidden)
    assert network.biases[1] == pytest.approx(b1 + 0.5 * g_out)


def test_backward_descends_the_squared_error_gradient():
    network = FeedforwardNetwork([3, 4, 3, 2], learning_rate=1.0, seed=5)
    x = np.array([0.3, -0.7, 0.9])
    t = np.array([0.2, 0.8])

    def loss() -> float:
        out = network.forward(x)
        return 0.5 * float(np.sum((t - out) ** 2))

    eps = 1e-6
    numeric = []
    for W in network.get_weights():
        grad = np.zeros_like(W)
        for idx in np.ndindex(W.shape):
            original = W[idx]
            W[idx] = original + eps
            plus = loss()
            W[idx] = original - eps
            minus = loss()
            W[idx] = original
            grad[idx] = (plus - minus) / (2 * eps)
        numeric.append(grad)

    before = [W.copy() for W in network.get_weights()]
    network.forward(x)
    network.backward(t)
    for old, new, grad in zip(before, network.get_weights(), numeric):
        assert np.allclose(new - old, -grad, atol=1e-7)


def test_train_returns_pre_update_error_and_counts_examples():
    network = FeedforwardNetwork([2, 3, 2], seed=4)
    inputs, targets = [0.0, 1.0], [1.0, 0.0]
    prediction = network.forward(inputs).copy()
    expected = float(np.mean((np.asarray(targets) - prediction) ** 2))

    error = network.train(inputs, targets)

    assert error == pytest.approx(expected, rel=1e-12)
    assert network.last_error == error
    assert network.epoch == 1
    network.train(inputs, targets)
    assert network.epoch == 2


def test_predict_is_forward_alias():
    network = FeedforwardNetwork([2, 2], seed=0)
    assert np.array_equal(network.predict([0.5, 0.5]).copy(), network.forward([0.5, 0.5]))


def test_classify_breaks_ties_towards_lowest_index():
    network = FeedforwardNetwork([2, 3], seed=0)
    network.weights[0][...] = 0.0
    network.biases[0][...] = [-1.0, 2.0, 2.0]
    assert network.classify([0.3, 0.7]) == 1

    network.biases[0][...] = 0.0
    assert network.classify([0.3, 0.7]) == 0


@pytest.mark.parametrize("inputs", [[1.0], [1.0, 0.0, 0.0], [], [[1.0, 0.0]]])
def test_shape_mismatch_is_rejected_without_mutation(inputs):
    network = FeedforwardNetwork([2, 4, 1], seed=0)
    network.train([1.0, 1.0], [1.0])
    snapshot = _snapshot(network)
    epoch = network.epoch

    with pytest.raises(InputShapeError):
        network.forward(inputs)
    with pytest.raises(InputShapeError):
        network.train(inputs, [1.0])
    with pytest.raises(InputShapeError):
        network.classify(inputs)

    assert network.epoch == epoch
    _assert_unchanged(network, snapshot)


def test_bad_targets_leave_state_untouched():
    network = FeedforwardNetwork([2, 4, 1], seed=0)
    network.forward([0.0, 1.0])
    snapshot = _snapshot(network)

    with pytest.raises(InputShapeError):
        network.train([1.0, 0.0], [1.0, 0.0])
    with pytest.raises(InputShapeError):
        network.backward([])

    assert network.epoch == 0
    _assert_unchanged(network, snapshot)
    # the instance stays usable after a rejected call
    assert network.train([1.0, 0.0], [1.0]) >= 0.0


def test_non_numeric_inputs_raise_input_shape_error():
    network = FeedforwardNetwork([2, 1], seed=0)
    with pytest.raises(InputShapeError):
        network.forward(["a", "b"])


def test_reset_redraws_parameters_in_place():
    network = FeedforwardNetwork([2, 4, 1], seed=8)
    for _ in range(10):
        network.train([1.0, 0.0], [1.0])
    weight_arrays = network.get_weights()
    before = [w.copy() for w in weight_arrays]

    network.reset()

    assert network.epoch == 0
    assert network.last_error == 0.0
    assert network.get_weights() is weight_arrays
    for old, new in zip(before, network.get_weights()):
        assert new.shape == old.shape
        assert np.all(np.abs(new) <= xavier_limit(*new.shape))
        assert not np.array_equal(old, new)
    for b in network.get_biases():
        assert np.all(np.abs(b) <= BIAS_RANGE)
    for a in network.get_activations():
        assert not a.any()
    for g in network.get_gradients():
        assert not g.any()


def test_zero_learning_rate_freezes_parameters():
    network = FeedforwardNetwork([2, 3, 1], seed=2)
    network.set_learning_rate(0.0)
    weights = [w.copy() for w in network.get_weights()]
    network.train([1.0, 1.0], [0.0])
    for old, new in zip(weights, network.get_weights()):
        assert np.array_equal(old, new)
    assert network.epoch == 1


def test_negative_learning_rate_is_accepted():
    network = FeedforwardNetwork([2, 1], seed=2)
    network.set_learning_rate(-0.25)
    assert network.learning_rate == -0.25


def test_describe_reports_parameter_count():
    network = FeedforwardNetwork([2, 4, 1], seed=0)
    description = network.describe()
    assert description.layer_sizes == [2, 4, 1]
    assert description.parameter_count == 2 * 4 + 4 + 4 * 1 + 1


def test_sigmoid_clips_extreme_inputs():
    with np.errstate(over="raise"):
        values = sigmoid(np.array([-1000.0, 0.0, 1000.0]))
    assert values[0] > 0.0
    assert values[1] == 0.5
    assert values[2] == 1.0
    assert sigmoid_derivative(np.array([0.5]))[0] == 0.25
