# Product-side licensing: activation codes and license verification
